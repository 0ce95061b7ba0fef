"""Availability summary per week.

Counts are positional: flag i of every participant belongs to week i.
"""
from typing import Any, Dict, List


def compute_week_totals(weeks, participants) -> List[Dict[str, Any]]:
    """Return one entry per week:

    { 'week_id': int, 'label': str, 'available': int, 'total': int, 'names': [str, ...] }
    """
    totals = []
    for index, week in enumerate(weeks):
        names = [p.name for p in participants
                 if index < len(p.availability) and p.availability[index]]
        totals.append({
            'week_id': week.id,
            'label': week.label,
            'available': len(names),
            'total': len(participants),
            'names': names,
        })
    return totals


def best_week_ids(totals: List[Dict[str, Any]]) -> List[int]:
    """Ids of the weeks with the most available participants (none if nobody is available)."""
    top = max((t['available'] for t in totals), default=0)
    if top == 0:
        return []
    return [t['week_id'] for t in totals if t['available'] == top]
