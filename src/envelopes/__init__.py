"""Local-first envelope budgeting with CSV import."""

__version__ = "0.1.0"


def __getattr__(name):
    # cli.main imports every command module and the store; load it on demand
    if name == "main":
        from envelopes.cli.main import main

        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
