# alerts/message.py

from quality_monitor.schemas import AlertSignal


def compose_title(signal: AlertSignal) -> str:
    return f"{signal.severity.upper()} Alert: {signal.title}"


def compose_message(signal: AlertSignal, further: int) -> str:
    """
    Render the alert body for a fired signal.

    Args:
        signal: The signal that fired the rule.
        further: Count of other qualifying signals folded into this event.

    Returns:
        str: Human-readable alert message.
    """
    lines = [signal.description]

    if signal.column is not None:
        lines.append(
            f"Column: {signal.column} ({signal.affected_rows} rows, "
            f"{signal.percentage:.1f}%)",
        )

    lines.append(f"Alert type: {signal.alert_type} | Severity: {signal.severity}")

    if further:
        noun = "signal" if further == 1 else "signals"
        lines.append(f"{further} further qualifying {noun} in this run")

    return "\n".join(lines)
