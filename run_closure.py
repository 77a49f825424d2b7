"""
Run a Pool Closure

Loads a pool (participants, confirmed payments, number scores) from JSON,
closes it, prints the event log and writes the closure snapshot and the
wager table to the output directory.
"""
import argparse
import json
import sys
from decimal import Decimal
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent))

from bolao_model.closure import (
    ClosureOrchestrator, InMemoryClosureStore, ParticipantSelection, verify_closure
)
from bolao_model.config import DATA_DIR, LOTTERY_CONFIG, OUTPUT_DIR
from bolao_model.engines import CPAllocationSolver, DPAllocationSolver, summarize_financials
from bolao_model.errors import BolaoError, InsufficientFunds


def load_store(path: Path) -> tuple:
    """Build an in-memory store from a pool JSON document"""
    with open(path, encoding='utf-8') as fh:
        doc = json.load(fh)

    pool = doc['pool']
    store = InMemoryClosureStore()
    store.add_pool(pool['id'], pool['name'], Decimal(str(pool['quota_value'])))

    for p in doc.get('participants', []):
        store.add_participant(
            pool['id'],
            ParticipantSelection(
                participant_id=str(p['id']),
                name=p['name'],
                numbers=tuple(p.get('numbers', [])),
                quota_quantity=p.get('quota_quantity') or 1
            ),
            payment_confirmed=p.get('payment_confirmed', True)
        )

    store.set_scores(pool['id'], {int(n): s for n, s in doc.get('scores', {}).items()})
    return store, pool['id']


def main():
    parser = argparse.ArgumentParser(description="Close a pooled-lottery bolao")
    parser.add_argument('--input', type=Path, default=DATA_DIR / 'sample_pool.json')
    parser.add_argument('--admin', default='admin')
    parser.add_argument('--seed', type=int, default=None,
                        help="Seed for the random fallbacks (reproducible closure)")
    parser.add_argument('--solver', choices=['dp', 'cp'], default='dp')
    parser.add_argument('--output-dir', type=Path, default=OUTPUT_DIR)
    parser.add_argument('--quiet', action='store_true')
    args = parser.parse_args()

    store, pool_id = load_store(args.input)
    solver = CPAllocationSolver() if args.solver == 'cp' else DPAllocationSolver()
    levels = list(LOTTERY_CONFIG.ticket_table())

    try:
        financials = summarize_financials(store.get_total_funds(pool_id), levels, solver)
    except InsufficientFunds as e:
        print(f"Cannot close: {e}")
        print(f"  {e.breakdown['message']}")
        return 1

    print("=" * 60)
    print(f"Main wager: {financials.breakdown['main_bet']}")
    print(f"Surplus:    {financials.breakdown['surplus']}")
    print(f"Remaining:  {financials.breakdown['remaining']}")
    print("=" * 60)

    orchestrator = ClosureOrchestrator(
        store,
        levels=levels,
        solver=solver,
        rng=np.random.default_rng(args.seed),
        verbose=not args.quiet
    )
    try:
        result = orchestrator.close(pool_id, args.admin)
    except (BolaoError, ValueError) as e:
        print(f"Closure failed: {e}")
        return 1

    args.output_dir.mkdir(parents=True, exist_ok=True)
    snapshot_path = args.output_dir / f"closure_{pool_id}.json"
    with open(snapshot_path, 'w', encoding='utf-8') as fh:
        json.dump(
            {'fingerprint': result.fingerprint, 'closure': result.record.to_dict()},
            fh, indent=2, ensure_ascii=False
        )
    wagers_path = args.output_dir / f"wagers_{pool_id}.csv"
    result.wagers_dataframe().to_csv(wagers_path, index=False)

    print()
    print(result.wagers_dataframe().to_string(index=False))
    print()
    print(f"Fingerprint verified: {verify_closure(store, pool_id)}")
    print(f"Saved: {snapshot_path}")
    print(f"Saved: {wagers_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
