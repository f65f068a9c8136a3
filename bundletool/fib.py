# SPDX-License-Identifier: MIT
#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import sys, argparse, os

sys.path.insert(0, os.path.dirname(__file__))
import fib_core as core  # noqa: E402


class ResponseFileParser(argparse.ArgumentParser):
    def convert_arg_line_to_args(self, arg_line):
        return core.read_response_args(arg_line)


def build_parser():
    ap = ResponseFileParser(
        prog="fib",
        description="Root command for file Bundler CLI",
        fromfile_prefix_chars="@",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_bundle = sub.add_parser("bundle", aliases=["b"], help="Bundle code files into a single file")
    p_bundle.add_argument("-l", "--language", required=True,
                          help="Comma-separated list of programming languages to include in the bundle. "
                               "Use 'all' to include all code files.")
    p_bundle.add_argument("-d", "--output", required=True, help="File path and name")
    p_bundle.add_argument("-n", "--note", nargs="?", const=True, default=False, type=core.parse_bool,
                          help="Include notes on source and file names.")
    p_bundle.add_argument("-s", "--sort", nargs="?", const=True, default=False, type=core.parse_bool,
                          help="Sort files in alphabetical order if true, sort by file type if false.")
    p_bundle.add_argument("-r", "--remove-empty-lines", nargs="?", const=True, default=False,
                          type=core.parse_bool, help="Remove empty lines from the files.")
    p_bundle.add_argument("-a", "--author", help="Name of the author to include in the bundle.")
    p_bundle.add_argument("--root", help="Directory to scan (default: current directory)")

    sub.add_parser("create-rsp", help="Create a response file for the bundle command")
    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)

    cmdline = [args.cmd]
    if args.cmd in ("bundle", "b"):
        cmdline += ["-l", args.language, "-d", args.output]
        if args.note: cmdline += ["-n"]
        if args.sort: cmdline += ["-s"]
        if args.remove_empty_lines: cmdline += ["-r"]
        if args.author: cmdline += ["-a", args.author]
        if args.root: cmdline += ["--root", args.root]
    elif args.cmd == "create-rsp":
        pass

    try:
        rc = core.run_command(cmdline)
    except BrokenPipeError:
        rc = 0
    sys.exit(rc)

if __name__ == "__main__":
    main()
