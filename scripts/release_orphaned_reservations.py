#!/usr/bin/env python3
"""
Release Orphaned Reservations

A vehicle is Reserved from the moment a marketplace sale starts until its
payment settles. If registration dies after reserving but before the sale
and payment are written, the vehicle is left Reserved with no Pending
payment and can never be bought. This script finds such vehicles and, with
--apply, returns them to Available.

Usage:
    python release_orphaned_reservations.py            # dry run, list only
    python release_orphaned_reservations.py --apply    # release them
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.inventory_service import find_orphaned_reservations, release_reservation


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Release Reserved vehicles that have no pending payment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # See what would be released
  python release_orphaned_reservations.py

  # Release them
  python release_orphaned_reservations.py --apply
        """
    )

    parser.add_argument(
        "--apply",
        action="store_true",
        help="Release the vehicles (default is a dry run)"
    )

    args = parser.parse_args(argv)

    try:
        orphaned = find_orphaned_reservations()

        print("=" * 60)
        print("ORPHANED RESERVATIONS" + ("" if args.apply else " (dry run)"))
        print("=" * 60)

        if not orphaned:
            print("No orphaned reservations found.")
            return 0

        released = 0
        for vehicle in orphaned:
            label = f"{vehicle.vehicle_id}  {vehicle.license_plate or '-'}  {vehicle.sale_price}"
            if not args.apply:
                print(f"  would release {label}")
                continue
            if release_reservation(vehicle.vehicle_id, sale_id=vehicle.reserved_sale_id):
                released += 1
                print(f"  released      {label}")
            else:
                print(f"  skipped       {label} (status changed)")

        print()
        print(f"Found: {len(orphaned)}")
        if args.apply:
            print(f"Released: {released}")
        else:
            print("Re-run with --apply to release them.")
        print("=" * 60)
        return 0

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130

    except Exception as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
