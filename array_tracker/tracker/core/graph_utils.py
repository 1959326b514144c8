"""
Graph utilities.

Print and analyse the call graph reachable from a tracked output.
"""

import numpy as np
from typing import Dict, List
from collections import Counter

from .engine import toposort
from .var import TrackedArray


def _index(order: List[TrackedArray]) -> Dict[int, int]:
    return {id(v): i for i, v in enumerate(order)}


def get_graph_stats(root: TrackedArray) -> Dict:
    """
    Collect graph statistics without printing.

    Returns:
        dict with node/leaf/edge counts, fan-in/fan-out and an op breakdown
    """
    order = toposort(root)
    calls = [v.producer for v in order if v.producer is not None]

    fan_ins = [sum(p is not None for p in c.inputs) for c in calls]
    fan_outs = Counter()
    for c in calls:
        for p in c.inputs:
            if p is not None:
                fan_outs[id(p)] += 1

    return {
        'nodes': len(order),
        'leaves': len(order) - len(calls),
        'edges': sum(fan_ins),
        'max_fan_in': max(fan_ins) if fan_ins else 0,
        'avg_fan_in': float(np.mean(fan_ins)) if fan_ins else 0.0,
        'max_fan_out': max(fan_outs.values()) if fan_outs else 0,
        'avg_fan_out': float(np.mean(list(fan_outs.values()))) if fan_outs else 0.0,
        'operations': dict(Counter(c.op_tag for c in calls)),
    }


def print_graph_summary(root: TrackedArray, detailed: bool = False) -> Dict:
    """
    Print a summary of the graph behind `root`.

    Args:
        root: tracked output
        detailed: also list every node (graphs up to 100 nodes)

    Returns:
        the statistics dict from get_graph_stats
    """
    stats = get_graph_stats(root)

    print("\n" + "="*70)
    print("COMPUTATION GRAPH SUMMARY")
    print("="*70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Leaf values:        {stats['leaves']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    n_calls = max(stats['nodes'] - stats['leaves'], 1)
    for op_type, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / n_calls
        print(f"  {op_type:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed and stats['nodes'] <= 100:
        print()
        print_computation_graph(root, max_nodes=100)

    print("="*70 + "\n")
    return stats


def print_computation_graph(root: TrackedArray, max_nodes: int = 20) -> None:
    """
    Print the graph structure, inputs first.

    Args:
        root: tracked output
        max_nodes: how many nodes to print at most
    """
    order = toposort(root)
    index = _index(order)

    for i, v in enumerate(order[:max_nodes]):
        shape = "x".join(map(str, v.shape)) or "scalar"
        if v.producer is None:
            label = v.name or "leaf"
            print(f"Node {i:4d}: {label:12s} ({shape}) [leaf/input]")
        else:
            parent_info = ", ".join(
                f"Node{index[id(p)]}" if p is not None else "const"
                for p in v.producer.inputs
            )
            print(f"Node {i:4d}: {v.producer.op_tag:12s} ({shape}) <- [{parent_info}]")

    if len(order) > max_nodes:
        print(f"... ({len(order) - max_nodes} more nodes)")
