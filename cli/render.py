from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _alert_line(node: str, alert: Dict[str, Any]) -> None:
    active = bool(alert.get("active"))
    delta = alert.get("delta")
    delta_text = f"{delta:.2f}" if isinstance(delta, (int, float)) else "n/a"
    typer.secho(
        f"  - {node}: {'ACTIVE' if active else 'ok'} (delta={delta_text}, at {alert.get('_time')})",
        fg=typer.colors.RED if active else None,
    )


def render_snapshot(payload: Dict[str, Any]) -> None:
    echo_heading("Sensor Snapshot")
    echo_key_values([("timestamp", payload.get("timestamp"))])

    sensor_data = payload.get("sensorData") or {}
    typer.echo()
    echo_heading("Nodes")
    if sensor_data:
        for node, summary in sensor_data.items():
            typer.echo(f"{node}:")
            echo_key_values(
                [
                    ("  sensor_value", summary.get("sensor_value")),
                    ("  avg", summary.get("avg")),
                    ("  variance", summary.get("variance")),
                    ("  temperature", summary.get("temperature")),
                    ("  rssi", summary.get("rssi")),
                    ("  hops", summary.get("hops")),
                    ("  _time", summary.get("_time")),
                ]
            )
    else:
        typer.echo("No readings in the lookback window.")

    render_alerts(payload)


def render_alerts(payload: Dict[str, Any]) -> None:
    alert_data = payload.get("alertData") or {}
    typer.echo()
    echo_heading("Alerts")
    if alert_data:
        for node, alert in alert_data.items():
            _alert_line(node, alert)
    else:
        typer.echo("No alerts evaluated.")
