"""Markdown reporter for benchwatch.

This module renders benchmark comparisons and performance alerts as
Markdown bodies suitable for commit comments. It never performs I/O.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from benchwatch.regression.detector import compute_ratio

if TYPE_CHECKING:
    from benchwatch.core.types import BenchmarkResult, RepositoryContext, Run
    from benchwatch.regression.models import Alert

DEFAULT_SUITE_NAME = "Benchmark"
PROJECT_URL = "https://github.com/marketplace/actions/continuous-benchmark"


def float_str(n: float) -> str:
    """Format a number for display.

    Integers are shown without decimals, values above 0.1 with two
    decimals and smaller values at full precision.

    Example:
        >>> float_str(2.0)
        '2'
        >>> float_str(1.23456)
        '1.23'
        >>> float_str(0.0123)
        '0.0123'
        >>> float_str(math.inf)
        'inf'
    """
    if float(n).is_integer():
        return f"{n:.0f}"
    if n > 0.1:
        return f"{n:.2f}"
    return str(n)


def format_value(value: float) -> str:
    """Format a measured value, dropping the fraction of whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def str_val(result: BenchmarkResult | None) -> str:
    """Format a benchmark result as a table cell.

    Args:
        result: Result to format, or None for an empty cell.

    Returns:
        Value and unit, with the range in parentheses when present.
    """
    if result is None:
        return ""
    text = f"`{format_value(result.value)}` {result.unit}"
    if result.range:
        text += f" (`{result.range}`)"
    return text


class MarkdownReporter:
    """Reporter that renders benchmark comparisons as Markdown.

    Attributes:
        repo: Repository the report is about.
        footer_text: Custom text placed above the generated footer.

    Example:
        >>> reporter = MarkdownReporter(repo)
        >>> body = reporter.comparison("Benchmark", current, previous, best)
    """

    def __init__(self, repo: RepositoryContext, footer_text: str | None = None) -> None:
        """Initialize MarkdownReporter.

        Args:
            repo: Repository the report is about.
            footer_text: Custom text placed above the generated footer.
        """
        self.repo = repo
        self.footer_text = footer_text

    def footer(self) -> str:
        """Build the footer linking the workflow that produced the report."""
        action_url = f"{self.repo.html_url}/actions?query=workflow%3A{quote(self.repo.workflow, safe='')}"
        footer = (
            f"This comment was automatically generated by [workflow]({action_url}) "
            f"using [github-action-benchmark]({PROJECT_URL})."
        )
        if self.footer_text:
            footer = f"{self.footer_text}\n\n{footer}"
        return footer

    @staticmethod
    def _table_header(current: Run, previous: Run, compare_with_best: bool) -> list[str]:
        ratio_str = "Ratio vs. Best" if compare_with_best else "Ratio"
        return [
            f"| Benchmark suite | Best | Previous: {previous.commit.id} | Current: {current.commit.id} | {ratio_str} |",
            "|-|-|-|-|-|",
        ]

    def comparison(
        self,
        suite_name: str,
        current: Run,
        previous: Run,
        best: dict[str, BenchmarkResult],
        compare_with_best: bool = False,
    ) -> str:
        """Render the full comparison of a run.

        Args:
            suite_name: Suite the run belongs to.
            current: The current run.
            previous: The previous run.
            best: Best prior result per benchmark name.
            compare_with_best: Whether ratios are computed against the best results.

        Returns:
            Markdown body with one table row per benchmark.
        """
        lines = [
            f"# {suite_name}",
            "",
            "<details>",
            "",
            *self._table_header(current, previous, compare_with_best),
        ]

        for bench in current.benches:
            best_result = best.get(bench.name)
            prev_result = previous.find(bench.name)
            line = f"| `{bench.name}` | {str_val(best_result)} | {str_val(prev_result)} | {str_val(bench)}"

            base = best_result if compare_with_best else prev_result
            if base is not None:
                ratio = compute_ratio(current.tool, base.value, bench.value)
                line += f" | `{float_str(ratio)}` |"
            else:
                line += " | |"

            lines.append(line)

        lines.extend(["", "</details>", "", self.footer()])
        return "\n".join(lines)

    def alert(
        self,
        alerts: list[Alert],
        suite_name: str,
        current: Run,
        previous: Run,
        best: dict[str, BenchmarkResult],
        threshold: float,
        compare_with_best: bool = False,
        cc_users: list[str] | None = None,
    ) -> str:
        """Render a performance alert.

        Args:
            alerts: Alerts to list.
            suite_name: Suite the run belongs to.
            current: The current run.
            previous: The previous run.
            best: Best prior result per benchmark name.
            threshold: Alert threshold that was exceeded.
            compare_with_best: Whether ratios were computed against the best results.
            cc_users: Accounts to mention.

        Returns:
            Markdown body with one table row per alert.
        """
        # The default suite name carries no information
        suite_text = "" if suite_name == DEFAULT_SUITE_NAME else f" **'{suite_name}'**"
        title = "# Performance Report" if threshold == 0 else "# :warning: **Performance Alert** :warning:"
        lines = [
            title,
            "",
            f"Possible performance regression was detected for benchmark{suite_text}.",
            "Benchmark result of this commit is worse than the previous benchmark result "
            f"exceeding threshold `{float_str(threshold)}`.",
            "",
            *self._table_header(current, previous, compare_with_best),
        ]

        for alert in alerts:
            bench = alert.current
            lines.append(
                f"| `{bench.name}` | {str_val(best.get(bench.name))} | {str_val(previous.find(bench.name))} "
                f"| {str_val(bench)} | `{float_str(alert.ratio)}` |"
            )

        lines.extend(["", self.footer()])

        if cc_users:
            lines.extend(["", f"CC: {' '.join(cc_users)}"])

        return "\n".join(lines)
