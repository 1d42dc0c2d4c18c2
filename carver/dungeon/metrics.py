from typing import Any, Dict


def init_metrics() -> Dict[str, Any]:
    return {
        'steps': 0,
        'steps_by_phase': {},
        'rooms_attempted': 0,
        'rooms_placed': 0,
        'maze_seeds': 0,
        'maze_cells': 0,
        'fill_entries_discarded': 0,
        'connectors_initial': 0,
        'connectors_opened': 0,
        'extra_connectors_opened': 0,
        'connectors_stranded': 0,
        'dead_ends_removed': 0,
        'runtime_ms': 0.0,
        'phase_ms': {},
    }
