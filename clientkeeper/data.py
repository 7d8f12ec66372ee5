# clientkeeper/data.py

from datetime import time

shop_settings = {
    "open_time": time(8, 0),
    "close_time": time(18, 0),
    "slot_minutes": 30,
    # length assumed for a prospective booking when offering slots
    "default_duration_minutes": 60,
    "min_duration_minutes": 15,
    "max_duration_minutes": 240,
}
