#!/usr/bin/env python3
"""
Example Batch Reactor Fuel Cycle Simulation

This script demonstrates how to use the fuel_cycle package to run a
batch-refueled reactor against a fresh fuel source and a spent fuel sink.

Usage:
    python run_simulation.py [--duration STEPS] [--cycle-time STEPS]

Example:
    python run_simulation.py --duration 60 --cycle-time 18 --refuel-time 2
"""

import argparse
import logging
import sys
import os

# Add parent directory to path for importing fuel_cycle
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fuel_cycle.config import ReactorConfig
from fuel_cycle.errors import FuelCycleError
from fuel_cycle.reactor import Reactor, create_reactor
from fuel_cycle.simulation import FuelSink, FuelSource, Simulation


def run_basic_simulation(
    duration: int = 60,
    cycle_time: int = 18,
    refuel_time: int = 2,
    n_assem_spent: int = 1000000000,
    supply_rate: float = float("inf"),
    config_path: str = None,
):
    """
    Run one reactor with ample fuel supply and spent fuel disposal.

    Args:
        duration: Number of time steps
        cycle_time: Operating steps per cycle
        refuel_time: Minimum refueling steps
        n_assem_spent: Spent fuel storage in assemblies
        supply_rate: Fresh fuel throughput per step [kg]
        config_path: Optional JSON reactor configuration
    """
    print("\n" + "="*70)
    print("       BATCH REACTOR FUEL CYCLE SIMULATION")
    print("="*70)

    if config_path:
        reactor = Reactor(ReactorConfig.from_json(config_path))
        incommods = sorted({f.incommod for f in reactor.ledger})
        outcommods = reactor.ledger.unique_outcommods()
    else:
        reactor = create_reactor(
            n_assem_batch=64,
            assem_size=446.0,
            n_assem_core=193,
            n_assem_fresh=64,
            n_assem_spent=n_assem_spent,
            cycle_time=cycle_time,
            refuel_time=refuel_time,
        )
        incommods = ["fresh_fuel"]
        outcommods = ["spent_fuel"]

    sim = Simulation(duration=duration)
    for commod in incommods:
        sim.add_agent(FuelSource(commod, throughput=supply_rate, name=f"source_{commod}"))
    sim.add_agent(reactor)
    sink = sim.add_agent(FuelSink(outcommods, name="repository"))

    print(f"\nRunning {duration} time steps...")
    history = sim.run()[reactor.name]

    summary = reactor.summary()
    print(f"\nReactor State (t={summary['time']}):")
    print(f"  Phase:                  {summary['phase']}")
    print(f"  Cycle step:             {summary['cycle_step']}")
    print(f"  Fresh assemblies:       {summary['fresh_assemblies']}")
    print(f"  Core assemblies:        {summary['core_assemblies']}")
    print(f"  Spent assemblies:       {summary['spent_assemblies']}")

    print(f"\nFuel Cycle Results:")
    print(f"  Capacity factor:        {sim.capacity_factor(reactor.name):.3f}")
    print(f"  Cycles started:         {len(sim.recorder.events('CYCLE_START'))}")
    print(f"  Peak spent inventory:   {history['spent'].max()} assemblies")
    print(f"  Sent to repository:     {sink.quantity():.1f} kg")

    return sim, reactor


def run_storage_study(duration: int = 60):
    """
    Compare capacity factor for different spent fuel storage sizes.

    Without a place to send spent fuel, a reactor stops once its spent
    fuel store cannot take another batch.
    """
    print("\n" + "="*70)
    print("       STORAGE STUDY: EFFECT OF SPENT FUEL CAPACITY")
    print("="*70)

    print(f"\n{'Spent store':>12} {'Capacity factor':>16} {'Discharges':>11}")
    print("-" * 42)

    for n_spent in [64, 128, 256, 512]:
        reactor = create_reactor(
            n_assem_batch=64,
            assem_size=446.0,
            n_assem_core=193,
            n_assem_spent=n_spent,
            cycle_time=18,
            refuel_time=2,
        )
        sim = Simulation(duration=duration)
        sim.add_agent(FuelSource("fresh_fuel"))
        sim.add_agent(reactor)
        sim.run()

        discharges = [
            e for e in sim.recorder.events("DISCHARGE") if e.value != "failed"
        ]
        print(f"{n_spent:>12d} {sim.capacity_factor(reactor.name):>16.3f} {len(discharges):>11d}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Batch Reactor Fuel Cycle Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Run basic simulation with defaults
  %(prog)s --cycle-time 12 --refuel-time 1
  %(prog)s --config reactor.json    # Reactor parameters from JSON
  %(prog)s --study storage          # Compare spent fuel storage sizes
        """
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=60,
        help="Number of time steps (default: 60)"
    )
    parser.add_argument(
        "--cycle-time",
        type=int,
        default=18,
        help="Operating time steps per cycle (default: 18)"
    )
    parser.add_argument(
        "--refuel-time",
        type=int,
        default=2,
        help="Minimum refueling time steps (default: 2)"
    )
    parser.add_argument(
        "--supply-rate",
        type=float,
        default=float("inf"),
        help="Fresh fuel supply per time step in kg (default: unlimited)"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Reactor configuration JSON file"
    )
    parser.add_argument(
        "--study",
        choices=["storage", "all"],
        help="Run specific study type"
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Output JSON file path for the reactor snapshot"
    )
    parser.add_argument(
        "--events",
        type=str,
        help="Output JSON file path for the event log"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log cycle boundaries (-v) or every event (-vv)"
    )

    args = parser.parse_args()

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.duration <= 0:
        print(f"Error: Duration must be positive, got {args.duration}")
        sys.exit(1)

    try:
        if args.study == "storage":
            run_storage_study(args.duration)
        elif args.study == "all":
            run_basic_simulation(args.duration, args.cycle_time, args.refuel_time)
            run_storage_study(args.duration)
        else:
            sim, reactor = run_basic_simulation(
                args.duration,
                args.cycle_time,
                args.refuel_time,
                supply_rate=args.supply_rate,
                config_path=args.config,
            )

            if args.output:
                reactor.to_json(args.output)
                print(f"\nSnapshot exported to: {args.output}")
            if args.events:
                sim.recorder.to_json(args.events)
                print(f"Events exported to: {args.events}")

    except FuelCycleError as e:
        print(f"\nError during simulation: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
