"""Small CLI to inspect the interaction models without a transport kernel.

Usage examples:

- Mean free path in each valley for a 1 V/m field along z:
    python -m drift_sim mfp --field 0 0 1 --velocity 1e5

- Check that valley reassignment is uniform:
    python -m drift_sim valley-stats --trials 100000 --seed 7

- List the surface policies found in the active config directory:
    python -m drift_sim surfaces --config-dir config/
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
from scipy.stats import chisquare

from drift_sim.config.loader import get_config_bundle
from drift_sim.debug_utils import debug_print, enable_debug_logging
from drift_sim.simulation.fields import UniformField
from drift_sim.simulation.intervalley import InterValleyScatteringModel, choose_valley
from drift_sim.simulation.surfaces import SurfacePolicyStore
from drift_sim.simulation.types import Carrier, CarrierType, StepContext, StepStatus
from drift_sim.simulation.valley import N_VALLEYS, ValleyTable


def mean_free_path_table(field: np.ndarray, velocity: float) -> dict[int, float]:
    """Return the inter-valley mean free path (m) per valley."""

    valleys = ValleyTable()
    model = InterValleyScatteringModel(valleys, UniformField(field))
    carrier = Carrier(
        track_id=1,
        carrier_type=CarrierType.ELECTRON,
        position=np.zeros(3),
        direction=np.array([0.0, 0.0, 1.0]),
        kinetic_energy=0.0,
        wave_vector=np.zeros(3),
    )
    step = StepContext(
        carrier=carrier,
        step_length=0.0,
        status=StepStatus.UNDEFINED,
        pre_volume=None,
        post_volume=None,
        post_position=carrier.position,
        post_velocity=velocity,
    )
    table = {}
    for valley in range(1, N_VALLEYS + 1):
        valleys.set_valley(carrier.track_id, valley)
        table[valley], _ = model.mean_free_path(step)
    return table


def valley_histogram(trials: int, seed: int | None = None) -> np.ndarray:
    """Counts of valleys 1..4 drawn over *trials* reassignments."""

    if trials <= 0:
        raise ValueError("trials must be a positive integer")
    rng = np.random.default_rng(seed)
    draws = np.fromiter((choose_valley(rng) for _ in range(trials)), dtype=np.int64, count=trials)
    return np.bincount(draws, minlength=N_VALLEYS + 1)[1:]


def _cmd_mfp(args: argparse.Namespace) -> None:
    table = mean_free_path_table(np.asarray(args.field, dtype=np.float64), args.velocity)
    print(f"Field {args.field} V/m, velocity {args.velocity:g} m/s")
    for valley, mfp in table.items():
        print(f"  valley {valley}: {mfp:.6g} m")


def _cmd_valley_stats(args: argparse.Namespace) -> None:
    counts = valley_histogram(args.trials, args.seed)
    stat, p_value = chisquare(counts)
    for valley, count in enumerate(counts, start=1):
        print(f"  valley {valley}: {count} ({count / args.trials:.4f})")
    print(f"chi2 = {stat:.3f}, p = {p_value:.3f}")


def _cmd_surfaces(args: argparse.Namespace) -> None:
    config_dir = Path(args.config_dir) if args.config_dir else None
    bundle = get_config_bundle(config_dir)
    store = SurfacePolicyStore.from_config(bundle.surfaces)
    if len(store) == 0:
        print(f"No surfaces configured in {bundle.config_dir}")
        return
    print(f"Surfaces from {bundle.config_dir}:")
    for (src, dst), policy in store.items():
        print(
            f"  {policy.name or '<unnamed>'}: {src} -> {dst} "
            f"absProb={policy.absorption_probability:g} "
            f"V={policy.electrode_potential:g}+/-{policy.electrode_delta_v:g} "
            f"minK(e)={policy.min_k_electron:g} minK(h)={policy.min_k_hole:g}"
        )


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Inspect DRIFT-SIM interaction models.")
    subparsers = ap.add_subparsers(dest="command")

    mfp_parser = subparsers.add_parser(
        "mfp", help="Print the inter-valley mean free path for each valley."
    )
    mfp_parser.add_argument(
        "--field", type=float, nargs=3, required=True, metavar=("EX", "EY", "EZ"),
        help="Lab-frame electric field (V/m)",
    )
    mfp_parser.add_argument("--velocity", type=float, required=True, help="Carrier speed (m/s)")
    mfp_parser.set_defaults(func=_cmd_mfp)

    stats_parser = subparsers.add_parser(
        "valley-stats", help="Histogram repeated valley reassignments."
    )
    stats_parser.add_argument("--trials", type=int, default=100000, help="Number of draws")
    stats_parser.add_argument("--seed", type=int, default=None, help="RNG seed")
    stats_parser.set_defaults(func=_cmd_valley_stats)

    surf_parser = subparsers.add_parser(
        "surfaces", help="List surface policies from the configuration directory."
    )
    surf_parser.add_argument(
        "--config-dir",
        help="Directory containing surfaces.yaml (defaults to DRIFT_SIM_CONFIG_DIR or config/).",
    )
    surf_parser.set_defaults(func=_cmd_surfaces)

    return ap


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    enable_debug_logging()
    ap = _build_parser()
    args = ap.parse_args(argv)
    debug_print("drift_sim argv:", argv)

    handler = getattr(args, "func", None)
    if handler is None:
        ap.print_help()
        return

    handler(args)


if __name__ == "__main__":  # pragma: no cover
    main()
