from rich.pretty import pprint

from argy import *

__prog__ = "argy-demo"


def main():
    parser = Parser(shell=True, fancy=True)
    parser.set_help_header("argy demo")
    parser.set_help_description("Parse a file name, a number and a handful of options.")
    parser.set_help_footer("Report bugs to the issue tracker.")

    parser.add_string("filename", help="Input file")
    parser.add_int("number", help="A number")
    parser.add_int("-c", "--count", help="How many times", default=10).in_range(1, 100)
    parser.add_float("-r", "--ratio", help="Mixing ratio", default=0.5)
    parser.add_ints("-i", "--ids", help="Identifiers", default=[1]).in_range(1, 50)
    parser.add_string("-e", "--email", help="Contact email", default="user@example.com").email()
    parser.add_string("--mac", help="MAC address", default="").validate(validators.optional(validators.mac_address()))
    parser.add_bool("-v", "--verbose", help="Chatty output")

    parser.parse()

    pprint(parser.arguments)
    if parser.get_bool("verbose"):
        pprint({argument.key: parser[argument.key] for argument in parser.arguments})


if __name__ == '__main__':
    main()
