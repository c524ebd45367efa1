"""Personal finance management backend."""
