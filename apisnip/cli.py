import argparse
import logging
import sys

from apisnip import __version__, interactive
from apisnip.codec import FORMATS, decode, detect_format, read_spec, sniff_format, write_spec
from apisnip.config import load_settings
from apisnip.document import EndpointKey, load
from apisnip.errors import ApisnipError
from apisnip.fetch import fetch, is_url
from apisnip.session import Session

DEFAULT_OUTFILE_STEM = 'apisnip.out'


def configure_logging(verbose):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def default_outfile(fmt):
    return f"{DEFAULT_OUTFILE_STEM}.{'json' if fmt == 'json' else 'yaml'}"


def build_parser():
    parser = argparse.ArgumentParser(
        prog='apisnip',
        description="Trim an OpenAPI specification down to the endpoints you pick",
    )
    parser.add_argument("infile", help="Path or http(s) URL of the OpenAPI specification (.json, .yaml, or .yml)")
    parser.add_argument("outfile", nargs='?', default=None,
                        help="Path to save the trimmed specification (default: apisnip.out.<format>)")
    parser.add_argument("-s", "--select", action='append', default=[], metavar='"METHOD /path"',
                        help="Endpoint to keep; repeat to keep several. Skips the interactive picker")
    parser.add_argument("-q", "--search", default='', help="Search query applied to --list")
    parser.add_argument("-l", "--list", action='store_true', help="Print the endpoint list and exit")
    parser.add_argument("-f", "--format", choices=FORMATS, help="Output format (default: from the output file name)")
    parser.add_argument("-c", "--config", help="Path of an alternative configuration file")
    parser.add_argument("-v", "--verbose", action='store_true', help="Enable verbose output")
    parser.add_argument("-V", "--version", action='version', version=f"%(prog)s {__version__}")
    return parser


def load_document(location, timeout):
    """
    Read a document from a local path or a URL.

    Returns:
        tuple: (Document, input format)
    """
    if is_url(location):
        text, content_type = fetch(location, timeout=timeout)
        if 'json' in content_type:
            fmt = 'json'
        else:
            fmt = detect_format(location, default=sniff_format(text))
        tree = decode(text, fmt)
    else:
        tree, fmt = read_spec(location)
    return load(tree), fmt


def resolve_output(args, settings, input_format):
    """Pick the output path and format from flags, file name, config and input."""
    outfile = args.outfile or settings.outfile
    if args.format:
        fmt = args.format
    elif outfile:
        fmt = detect_format(outfile, default=settings.format or input_format)
    else:
        fmt = settings.format or input_format
    return outfile or default_outfile(fmt), fmt


def print_endpoints(endpoints, session):
    for endpoint in endpoints:
        marker = '*' if session.is_selected(endpoint.key) else ' '
        summary = endpoint.summary or 'No description'
        print(f"{marker} {endpoint.method.upper():7} {endpoint.path}  {summary}")


def write_trimmed(session, outfile, fmt):
    result = session.trim()
    for diagnostic in result.diagnostics:
        print(f"Warning: {diagnostic}")

    write_spec(result.document.to_raw(), outfile, fmt)
    print(
        f"Trimmed spec with {len(result.document.path_items())} paths, "
        f"{result.operation_count} operations and {result.component_count} components "
        f"written to {outfile}"
    )
    return result


def run(args):
    settings = load_settings(args.config)
    configure_logging(args.verbose or settings.verbose)

    document, input_format = load_document(args.infile, settings.timeout)
    if not document.endpoints():
        print(f"Warning: No operations found in {args.infile}")

    session = Session(document)
    for text in args.select:
        try:
            key = EndpointKey.parse(text)
        except ValueError as e:
            raise ApisnipError(str(e)) from e
        if not session.select(key):
            print(f"Warning: Endpoint '{key}' not found in the spec.")

    if args.list:
        session.search(args.search)
        print_endpoints(session.display_list(), session)
        return 0

    outfile, fmt = resolve_output(args, settings, input_format)

    if not args.select:
        try:
            confirmed = interactive.run(session, source=args.infile)
        except (KeyboardInterrupt, EOFError):
            confirmed = False
        if not confirmed:
            print("Nothing written")
            return 0

    write_trimmed(session, outfile, fmt)
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except ApisnipError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
