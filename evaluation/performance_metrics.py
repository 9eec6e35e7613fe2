"""
Performance metrics and summary printing for local search runs
Minimal memory footprint
"""

from typing import Dict, List, Optional

from core.data_structures import Instance, Solution
from evaluation.cycle_analyzer import cycle_cost_breakdown


def calculate_improvement(initial_cost: int, final_cost: int) -> float:
    """
    Relative improvement in percent, 0 for a zero initial cost
    """
    if initial_cost == 0:
        return 0.0
    return (initial_cost - final_cost) / initial_cost * 100


def print_search_stats(solution: Solution, instance: Instance, stats: Optional[Dict] = None,
                       name: str = ""):
    """
    Print solution statistics
    """
    breakdown = cycle_cost_breakdown(solution, instance)
    if name:
        print(f"{name}")
    print(f"Total Cost: {breakdown['total_cost']}")
    print(f"Valid: {solution.is_valid(instance)}")

    if stats:
        print(f"\nSearch Statistics:")
        initial_cost = stats.get('initial_cost', breakdown['total_cost'])
        final_cost = stats.get('final_cost', breakdown['total_cost'])
        print(f"  Initial Cost: {initial_cost}")
        print(f"  Final Cost: {final_cost}")
        print(f"  Improvement: {calculate_improvement(initial_cost, final_cost):.2f}%")
        print(f"  Iterations: {stats.get('iterations', 0)}")
        print(f"  Moves Applied: {stats.get('moves_applied', 0)}")
        if stats.get('cost_corrections') or stats.get('apply_failures'):
            print(f"  Cost Corrections: {stats.get('cost_corrections', 0)}")
            print(f"  Apply Failures: {stats.get('apply_failures', 0)}")
        if stats.get('terminated_by'):
            print(f"  Terminated By: {stats['terminated_by']}")

    print(f"\nCycle Details:")
    print(f"  Cycle 1: {breakdown['cycle1_size']} nodes, cost={breakdown['cycle1_cost']}")
    print(f"  Cycle 2: {breakdown['cycle2_size']} nodes, cost={breakdown['cycle2_cost']}")


def summarize_runs(costs: List[int]) -> Dict[str, float]:
    """
    min / max / average over repeated runs of one configuration
    """
    if not costs:
        return {'runs': 0, 'min_cost': 0, 'max_cost': 0, 'avg_cost': 0.0}
    return {
        'runs': len(costs),
        'min_cost': min(costs),
        'max_cost': max(costs),
        'avg_cost': sum(costs) / len(costs),
    }


def format_stats_row(name: str, summary: Dict[str, float]) -> str:
    """One markdown table row: name | min (avg - max)"""
    if not summary.get('runs'):
        return f"| {name:<28} | No runs executed |"
    return (f"| {name:<28} | {summary['min_cost']} "
            f"({summary['avg_cost']:.2f} - {summary['max_cost']}) |")
