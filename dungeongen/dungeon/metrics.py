from typing import Any, Dict


def init_metrics() -> Dict[str, Any]:
    return {
        'rooms_attempted': 0,
        'rooms_placed': 0,
        'corridors_carved': 0,
        'extra_corridors_carved': 0,
        'cells_widened': 0,
        'dead_ends_grown': 0,
        'dead_ends_skipped': 0,
        'rocks_placed': 0,
        'rocks_removed': 0,
        'chests_placed': 0,
        'walls_derived': 0,
        'walls_patched': 0,
        'spawn_fallback': False,
        'runtime_ms': 0.0,
    }
