"""
Rich renderables for the scanner screen: the query box and the records table.
"""
from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..app import ScannerApp


def build_query_panel(app: ScannerApp) -> Panel:
    content = Text(app.display_query())
    if app.status:
        content.append("\n")
        content.append(app.status, style="red")
    return Panel(content, title=Text(" mDNS Query ", style="bold"), title_align="left", box=box.HEAVY)


def build_records_table(app: ScannerApp, placeholder: str) -> Table:
    table = Table(expand=True, box=None, header_style="bold", pad_edge=False)
    table.add_column("Host", ratio=40)
    table.add_column("IPv4", ratio=30)
    table.add_column("IPv6", ratio=30)
    for host, ipv4, ipv6 in app.rows(placeholder):
        table.add_row(host, ipv4, ipv6)
    return table


def build_view(app: ScannerApp, placeholder: str = "Not found") -> Group:
    records = Panel(
        build_records_table(app, placeholder),
        title=Text(" Records ", style="bold"),
        title_align="left",
        box=box.HEAVY,
    )
    return Group(build_query_panel(app), records)
