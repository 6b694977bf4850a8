from rich.console import Console
from rich.highlighter import ReprHighlighter
from rich.theme import Theme


class StrataHighlighter(ReprHighlighter):
    highlights = ReprHighlighter.highlights + [
        r"(?P<http_method>\b(?:GET|HEAD|POST|PUT|PATCH|DELETE|OPTIONS)\b)"
    ]


def get_console(stderr: bool = False) -> Console:
    return Console(
        stderr=stderr,
        highlighter=StrataHighlighter(),
        theme=Theme({"repr.http_method": "bold light_salmon3"}),
    )
