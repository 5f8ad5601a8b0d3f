"""
Argy help rendering.

render() turns a parser's declarations into a rich renderable:

    [header]
    usage: prog <filename> <number> [options]

    [description]

    positionals:
      filename <str>      Input file (required)
      number <int>        A number (required)

    options:
      -c, --count <int>   Count (default: 10)
      -h, --help          show this help message and exit

    [footer]

Palette keys
- header-section, usage-label, program-name, usage-section
- description-section, footer-section, group-label
- option-name, positional-name, metavar, argument-description
- default-label, default-value, required-label
- panel-title

Customization
- define a mapping named __styles__ in __main__ to override palette entries.
- colorful=False strips every style; fancy=True wraps the help in a Panel.
"""
from collections import defaultdict, deque

from rich.console import Group
from rich.containers import Lines
from rich.panel import Panel
from rich.text import Text

from .kinds import Kind
from .utils import Unset

PALETTE = {
    # === Head sections ===
    "header-section": "bold #FFFFFF",
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-section": "bold #36C5F0",
    "description-section": "italic #A3A3A3",
    "footer-section": "#737373",

    # === Groups / arguments ===
    "group-label": "bold #FFFFFF",
    "argument-description": "#9CA3AF",

    # === Names / metavars ===
    "option-name": "bold #00E6FF",
    "positional-name": "bold #22C55E",
    "metavar": "bold #FFD600",

    # === Annotations ===
    "default-label": "dim",
    "default-value": "#FF4D94",
    "required-label": "bold #EF4444",

    # === Fancy panel ===
    "panel-title": "bold #FF4D94",
}

HELP = "show this help message and exit"


def _styler(styles, colorful):
    def styler(style):
        return styles[style] if colorful else ""
    return styler


def _text(colorful):
    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)
    return text


def render(parser, console, /, *, colorful=True, fancy=False):
    """
    build the help renderable for a parser.

    console is only used for measuring (wrapping); nothing is printed.
    """
    styles = defaultdict(str, PALETTE | getattr(__import__("__main__"), "__styles__", {}))
    styler = _styler(styles, colorful)
    text = _text(colorful)

    width = console.width - 4 * fancy
    renders = []

    def metavar(argument):
        label = Text.assemble("<", text(argument.kind.element.__name__, styler("metavar")), ">")
        if argument.kind.listed:
            label.append("...")
        return label

    def names(argument):
        if argument.positional:
            return text(argument.key, styler("positional-name"))
        return Text(", ").join(text(flag, styler("option-name")) for flag in argument.flags)

    if header := parser.header:
        renders.append(text(header, styler("header-section")).append("\n"))

    # usage: prog <positional>... [options]
    usage = Text()
    usage.append("usage", styler("usage-label")).append(":")
    usage.append(" ")
    usage.append(text(parser.prog, styler("program-name")))
    usage.append(" ")
    offset = len(usage)

    inputs = deque()
    for argument in parser.positionals:
        inputs.append(Text.assemble(
            "<", text(argument.key, styler("usage-section")), ">", "..." if argument.kind.listed else "",
        ))
    inputs.append(Text.assemble("[", text("options", styler("usage-section")), "]"))

    lines = Lines([inputs.popleft()])
    while inputs:
        if len(lines[-1]) + 1 + len(input := inputs.popleft()) > width - offset:
            lines.append(input)
        else:
            lines[-1].append(Text(" ") + input)
    usage.append(lines.pop(0))
    for line in lines:
        usage.append("\n").append(" " * offset).append(line)
    renders.append(usage.append("\n"))

    if description := parser.description:
        renders.append(text(description, styler("description-section")).append("\n"))

    sections = {
        "positionals": [argument for argument in parser.arguments if argument.positional],
        "options": [argument for argument in parser.arguments if not argument.positional],
    }

    rows = {}
    for group, arguments in sections.items():
        rows[group] = []
        for argument in arguments:
            name = names(argument)
            if argument.kind is not Kind.BOOL:
                name = Text.assemble(name, " ", metavar(argument))
            descr = Text.assemble(text(argument.help, styler("argument-description")))
            if argument.default is not Unset:
                descr.append(" " if descr else "")
                descr.append(text("(default: ", styler("default-label")))
                descr.append(text(argument.describe()["default"] or '""', styler("default-value")))
                descr.append(text(")", styler("default-label")))
            elif argument.required:
                descr.append(" " if descr else "")
                descr.append(text("(required)", styler("required-label")))
            rows[group].append((name, descr))
    rows["options"].append((
        Text(", ").join(text(flag, styler("option-name")) for flag in ("-h", "--help")),
        text(HELP, styler("argument-description")),
    ))

    padding = 2
    indent = min(max(len(name) for group in rows.values() for name, _ in group) + padding + 3, max(width // 3, 12))

    groups = Text()
    for index, (group, entries) in enumerate(item for item in rows.items() if item[1]):
        groups.append("\n" * (index > 0))
        groups.append(text(group, styler("group-label"))).append(":")
        groups.append("\n")
        for name, descr in entries:
            section = Text(" " * padding).append(name)
            if descr:
                if len(section) >= indent - 1:
                    section.append("\n").append(" " * indent)
                else:
                    section.append(" " * (indent - len(section)))
                wrapped = descr.wrap(console, max(width - indent, 8))
                section.append(wrapped.pop(0))
                for line in wrapped:
                    section.append("\n").append(" " * indent).append(line)
            groups.append(section).append("\n")
    renders.append(groups)

    if footer := parser.footer:
        renders.append(text(footer, styler("footer-section")).append("\n"))

    renders[-1].rstrip()

    renderable = Group(*renders)
    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{parser.prog} HELP".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )
    return renderable


def plain(parser, console, /):
    """render help without any style, as a string (console must write to a buffer)."""
    with console.capture() as capture:
        console.print(render(parser, console, colorful=False))
    return capture.get()


__all__ = (
    "render",
    "plain",
)
