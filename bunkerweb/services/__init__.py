"""One service class per control-plane resource family."""
