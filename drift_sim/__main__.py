"""Module entry to expose `python -m drift_sim` CLI.

Delegates to `drift_sim.cli.main`.
"""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
