"""Map visualization of a recorded track."""

import folium
from folium import plugins

from .display import METRIC, format_distance, format_duration
from .models import Track


def accuracy_color(accuracy) -> str:
    """Marker color for a fix's accuracy"""
    if accuracy is None:
        return "gray"
    if accuracy < 10:
        return "green"
    elif accuracy < 20:
        return "orange"
    return "red"


def build_track_map(track: Track, system: str = METRIC) -> folium.Map:
    """Create a folium map of the track's waypoints and stopovers"""
    first = track.first_waypoint()
    last = track.last_waypoint()

    lats = [wp.lat for wp in track.waypoints]
    lons = [wp.lon for wp in track.waypoints]
    center_lat = sum(lats) / len(lats)
    center_lon = sum(lons) / len(lons)

    m = folium.Map(location=[center_lat, center_lon], zoom_start=16)

    # Add tile options
    folium.TileLayer("OpenStreetMap", name="OpenStreetMap").add_to(m)
    folium.TileLayer("CartoDB positron", name="Light").add_to(m)

    folium.PolyLine(
        [[wp.lat, wp.lon] for wp in track.waypoints],
        weight=4,
        color="blue",
        opacity=0.7,
        popup="Track"
    ).add_to(m)

    points_group = folium.FeatureGroup(name="Waypoints", show=False)
    stopovers_group = folium.FeatureGroup(name="Stopovers", show=True)

    for i, wp in enumerate(track.waypoints):
        fix = wp.fix
        accuracy = f"{fix.accuracy:.0f}m" if fix.accuracy is not None else "unknown"
        popup = f"""
            <b>Waypoint {i + 1}</b><br>
            Lat: {fix.lat:.6f}<br>
            Lon: {fix.lon:.6f}<br>
            Accuracy: {accuracy}<br>
            Provider: {fix.provider.value}<br>
            Distance: {format_distance(wp.distance_from_start, system)}
        """

        folium.CircleMarker(
            location=[fix.lat, fix.lon],
            radius=5,
            color=accuracy_color(fix.accuracy),
            fill=True,
            popup=folium.Popup(popup, max_width=200)
        ).add_to(points_group)

        if wp.is_stopover:
            folium.CircleMarker(
                location=[fix.lat, fix.lon],
                radius=9,
                color="purple",
                fill=False,
                weight=2,
                popup=f"Stopover at {format_distance(wp.distance_from_start, system)}"
            ).add_to(stopovers_group)

    points_group.add_to(m)
    stopovers_group.add_to(m)

    folium.Marker(
        [first.lat, first.lon],
        popup="Start",
        icon=folium.Icon(color="green", icon="play")
    ).add_to(m)
    folium.Marker(
        [last.lat, last.lon],
        popup="End",
        icon=folium.Icon(color="red", icon="stop")
    ).add_to(m)

    folium.LayerControl().add_to(m)

    summary = track.summary()
    legend_html = f"""
    <div style="
        position: fixed;
        bottom: 50px;
        left: 50px;
        z-index: 1000;
        background-color: white;
        padding: 10px;
        border-radius: 5px;
        border: 2px solid grey;
        font-family: Arial;
        font-size: 12px;
    ">
        <b>Track</b><br>
        <hr style="margin: 5px 0">
        Started: {summary.recording_start.strftime("%Y-%m-%d %H:%M")}<br>
        Duration: {format_duration(summary.duration)}<br>
        Distance: {format_distance(summary.distance, system)}<br>
        Waypoints: {summary.waypoint_count}<br>
        Stopovers: {summary.stopovers}<br>
        Steps: {summary.step_count:.0f}
    </div>
    """
    m.get_root().html.add_child(folium.Element(legend_html))

    plugins.Fullscreen().add_to(m)
    return m


def create_track_map(track: Track, output_path: str, system: str = METRIC):
    """Save the track map as an HTML file"""
    m = build_track_map(track, system)
    m.save(output_path)
    print(f"Track map saved to {output_path}")
