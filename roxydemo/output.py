"""Terminal output formatting for the demo."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import timedelta

RESET = "\x1b[0m"
BOLD = "\x1b[1m"
CYAN = "\x1b[36m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
RED = "\x1b[31m"
BLUE = "\x1b[34m"
MAGENTA = "\x1b[35m"
DIM = "\x1b[2m"

_BANNER_BORDER = "+" + "=" * 45 + "+"
_BANNER_LINES = (
    _BANNER_BORDER,
    "|     Roxy Full Demo - JSON-RPC Proxy        |",
    _BANNER_BORDER,
)
_COMPLETE_LINES = ("Demo complete!",)


def _millis(duration: timedelta | float) -> int:
    """Whole milliseconds of a timedelta or a number of seconds, truncated."""
    if isinstance(duration, timedelta):
        return duration // timedelta(milliseconds=1)
    return int(round(duration * 1_000_000)) // 1000


def _print_block(lines: Iterable[str], style: str) -> None:
    """Print styled lines framed by a blank line before and after."""
    print()
    for line in lines:
        print(f"{style}{line}{RESET}")
    print()


def node_color(name: str) -> str:
    """ANSI colour code for a node name."""
    if "1" in name:
        return RED
    if "2" in name:
        return YELLOW
    if "3" in name:
        return MAGENTA
    return BLUE


def print_banner() -> None:
    _print_block(_BANNER_LINES, f"{CYAN}{BOLD}")


def print_phase(number: int, total: int, description: str) -> None:
    print(f"{BOLD}[{number}/{total}] {description}...{RESET}")


def print_section(title: str) -> None:
    print()
    print(f"{CYAN}{BOLD}=== {title} ==={RESET}")


def print_success(message: str) -> None:
    print(f"  {GREEN}[OK]{RESET} {message}")


def print_info(message: str) -> None:
    print(f"  {BLUE}[INFO]{RESET} {message}")


def print_warning(message: str) -> None:
    print(f"  {YELLOW}[WARN]{RESET} {message}")


def print_error(message: str) -> None:
    print(f"  {RED}[ERROR]{RESET} {message}")


def print_node_started(name: str, url: str, latency_ms: int) -> None:
    color = node_color(name)
    print(
        f"  {GREEN}[OK]{RESET} {color}{name}{RESET} at {url} "
        f"{DIM}(latency: {latency_ms}ms){RESET}"
    )


def print_request_served(request_num: int, node_name: str, duration: timedelta | float) -> None:
    color = node_color(node_name)
    print(f"  Request {request_num}: served by {color}{node_name}{RESET} ({_millis(duration)}ms)")


def print_cache_result(label: str, duration: timedelta | float, is_cached: bool) -> None:
    cache_label = f"{GREEN}(cached){RESET}" if is_cached else f"{DIM}(backend){RESET}"
    print(f"  {label}: {_millis(duration)}ms {cache_label}")


def print_batch_result(method: str, result: str) -> None:
    print(f"  {DIM}[{method}]{RESET} -> {result}")


def print_failover_action(action: str) -> None:
    print(f"  {YELLOW}[ACTION]{RESET} {action}")


def print_rate_limit_result(request_num: int, success: bool, duration: timedelta | float) -> None:
    ms = _millis(duration)
    if success:
        print(f"  Request {request_num}: {GREEN}[ALLOWED]{RESET} ({ms}ms)")
    else:
        print(f"  Request {request_num}: {RED}[RATE LIMITED]{RESET} ({ms}ms)")


def print_routing_result(method: str, target_group: str, served_by: str) -> None:
    color = node_color(served_by)
    print(
        f"  {DIM}[{method}]{RESET} -> group '{BLUE}{target_group}{RESET}' "
        f"-> {color}{served_by}{RESET}"
    )


def print_blocked_method(method: str, error_code: int, error_msg: str) -> None:
    print(f"  {DIM}[{method}]{RESET} -> {RED}BLOCKED{RESET}")
    print(f"    Error: {DIM}{error_code}: {error_msg}{RESET}")


def print_allowed_method(method: str, result: str) -> None:
    print(f"  {DIM}[{method}]{RESET} -> {GREEN}{result}{RESET} [ALLOWED]")


def print_delay(seconds: float) -> None:
    print()
    print(f"  {DIM}(pausing {seconds:.1f}s before next demo...){RESET}")


def print_subsection(title: str) -> None:
    print()
    print(f"  {CYAN}--- {title} ---{RESET}")


def print_ema_explanation(text: str) -> None:
    print(f"  {DIM}{text}{RESET}")


def print_distribution(counts: Mapping[str, int]) -> None:
    """Print per-node request counts sorted by name, with a 20-character bar for 100%."""
    print()
    print(f"  {BOLD}Distribution:{RESET}")

    total = sum(counts.values())
    if total == 0:
        print("    No requests recorded")
        return

    for name, count in sorted(counts.items()):
        color = node_color(name)
        percentage = count / total * 100.0
        bar = "█" * int(percentage / 5.0)
        print(f"    {color}{name}{RESET}: {bar} ({count} requests, {percentage:.0f}%)")


def print_summary(node_counts: Iterable[tuple[str, int]]) -> None:
    print()
    print(f"{BOLD}Summary:{RESET}")
    for name, count in node_counts:
        print(f"  {node_color(name)}{name}{RESET}: {count} requests")


def print_complete() -> None:
    _print_block(_COMPLETE_LINES, f"{GREEN}{BOLD}")