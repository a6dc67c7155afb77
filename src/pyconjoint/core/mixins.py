"""Mixin classes for result dataclasses.

This module provides common formatting utilities for result summaries.
"""

from __future__ import annotations

from typing import Any, Mapping


class ResultSummaryMixin:
    """Common formatting utilities for result summaries.

    Provides helper methods for generating plain-text reports with
    consistent formatting across all result types.
    """

    @staticmethod
    def _format_header(title: str, width: int = 80) -> str:
        """Format a section header.

        Args:
            title: Header title text
            width: Total width of the header

        Returns:
            Formatted header string with border
        """
        border = "=" * width
        padding = (width - len(title)) // 2
        return f"{border}\n{' ' * padding}{title}\n{border}"

    @staticmethod
    def _format_value(value: Any) -> str:
        if isinstance(value, bool):
            return "Yes" if value else "No"
        if isinstance(value, float):
            if abs(value) < 0.0001 and value != 0:
                return f"{value:.4e}"
            if abs(value) >= 1000:
                return f"{value:,.2f}"
            return f"{value:.4f}"
        if value is None:
            return "N/A"
        return str(value)

    @staticmethod
    def _format_metric(label: str, value: Any, width: int = 40) -> str:
        """Format a metric label-value pair with dot leaders.

        Args:
            label: Metric name
            value: Metric value
            width: Total width for alignment

        Returns:
            Formatted metric string
        """
        formatted_value = ResultSummaryMixin._format_value(value)
        dots = "." * max(1, width - len(label) - len(formatted_value) - 2)
        return f"  {label} {dots} {formatted_value}"

    @staticmethod
    def _format_percent(label: str, fraction: float | None, width: int = 40) -> str:
        """Format a 0..1 fraction as a percentage metric."""
        text = "N/A" if fraction is None else f"{fraction * 100:.1f}%"
        dots = "." * max(1, width - len(label) - len(text) - 2)
        return f"  {label} {dots} {text}"

    @staticmethod
    def _format_mapping(
        values: Mapping[str, float],
        percent: bool = False,
        max_items: int = 10,
        width: int = 40,
    ) -> list[str]:
        """Format a key->number mapping, largest absolute value first."""
        if not values:
            return ["  (none)"]
        ordered = sorted(values.items(), key=lambda kv: -abs(kv[1]))
        lines = []
        for key, value in ordered[:max_items]:
            if percent:
                lines.append(ResultSummaryMixin._format_percent(key, value, width))
            else:
                lines.append(ResultSummaryMixin._format_metric(key, float(value), width))
        if len(ordered) > max_items:
            lines.append(f"  ... and {len(ordered) - max_items} more")
        return lines

    @staticmethod
    def _format_status(passed: bool, pass_text: str = "PASSED",
                       fail_text: str = "FAILED") -> str:
        """Format a pass/fail status indicator."""
        return pass_text if passed else fail_text

    @staticmethod
    def _format_quality(score: float | None) -> str:
        """Interpretation for validation rates (holdout accuracy, repeat consistency)."""
        if score is None:
            return "Not measured"
        if score >= 0.8:
            return "Excellent"
        if score >= 0.6:
            return "Good"
        return "Needs review"

    @staticmethod
    def _format_footer(computation_time_ms: float, width: int = 80) -> str:
        """Format the report footer with computation time."""
        border = "=" * width
        if computation_time_ms < 1000:
            time_str = f"{computation_time_ms:.2f} ms"
        else:
            time_str = f"{computation_time_ms / 1000:.2f} s"
        return f"\nComputation Time: {time_str}\n{border}"

    @staticmethod
    def _format_section(title: str) -> str:
        """Format a section subheader."""
        return f"\n{title}:\n{'-' * len(title)}"
