from strata.cli.commands import run

__all__ = ["run"]
