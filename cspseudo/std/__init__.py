# Builtin procedures injected into the global environment.
