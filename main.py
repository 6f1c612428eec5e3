from rich.pretty import pprint

from clasp import *


cli = Command(
    "tool",
    version="1.0",
    about="Demonstrates the parser",
    args=[
        Arg("name", "n", "name", takes_value=True, default_value="world", help="Who to greet"),
        Arg("verbose", "v", "verbose", action=ArgAction.INCREMENT, help="More output"),
        Arg("file", required=True, help="Input file"),
    ],
)


if __name__ == '__main__':
    pprint(cli.get_matches(colorful=True))
