"""Configuration settings for Tracklog."""

CONFIG = {
    "gps_poll_interval": 3,  # seconds
    "location_providers": ["gps", "network"],  # termux-location providers polled each cycle
    "location_timeout": 30,  # seconds per termux-location call
    "log_interval": 10,  # seconds between STATE log entries
    "distance_milestone_interval": 250,  # meters between distance announcements
    # Location arbitration
    "significant_time_delta": 120,  # seconds - older current fix is stale, candidate wins
    "significant_accuracy_delta": 200,  # meters - accuracy loss a newer same-provider fix may carry
    # Stopover detection
    "stopover_radius": 5,  # meters - consecutive fixes this close mean the device stood still
    "stopover_interval": 300,  # seconds - a silent gap this long also counts as a stop
    # Presentation
    "imperial_countries": {"US", "LR", "MM"},
    "long_distance_threshold": 1000,  # meters - switch to km/mi above this
}
