# SPDX-License-Identifier: MIT
"""
fib_core.py — bundle source files from a directory tree into one text file
"""
from __future__ import annotations

import fnmatch
import json
import os
import shlex
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Optional, Sequence

VALID_LANGUAGES: List[str] = [
    "c++", "c#", "javascript", "java", "python", "react", "php", "c", "assembly", "all",
]

LANGUAGE_ALIASES: Mapping[str, str] = MappingProxyType({"c++": "cpp", "c#": "csharp"})

ALL_EXTENSIONS: List[str] = [
    "*.cs", "*.js", "*.py", "*.java", "*.cpp", "*.h", "*.rb", "*.go",
    "*.php", "*.html", "*.css", "*.swift", "*.kt", "*.ts", "*.sql",
    "*.xml", "*.pl", "*.r", "*.lua", "*.dart", "*.scala", "*.groovy",
    "*.clj", "*.asm", "*.m", "*.v", "*.verilog", "*.docx",
]

LANGUAGE_EXTENSIONS: Mapping[str, List[str]] = MappingProxyType({
    "csharp": ["*.cs", "*.html", "*.css"],
    "javascript": ["*.js", "*.html", "*.css"],
    "python": ["*.py"],
    "java": ["*.java", "*.xml", "*.sql"],
    "react": ["*.js", "*.jsx", "*.tsx"],
    "cpp": ["*.cpp", "*.h"],
    "php": ["*.php", "*.html", "*.css"],
    "c": ["*.c", "*.h"],
    "assembly": ["*.asm"],
    "all": ALL_EXTENSIONS,
})

IGNORED_DIRECTORIES: List[str] = ["bin", "debug", "obj"]

RESPONSE_FILE_NAME = "responseFile.rsp"
AUTHOR_LINE = "// Author: {author}"
NOTE_LINE = "// Source: {path}"


class DirectoryNotFoundError(FileNotFoundError):
    """Root or output directory is missing."""


class UnsupportedLanguageError(ValueError):
    pass


@dataclass
class BundleOptions:
    languages: List[str]
    output: str
    note: bool = False
    sort: bool = False
    remove_empty_lines: bool = False
    author: str = ""
    root: Optional[str] = None


def parse_languages(value: str) -> List[str]:
    return [t.strip() for t in value.split(",") if t.strip()]


def invalid_languages(languages: Iterable[str]) -> List[str]:
    return [lang for lang in languages if lang.lower() not in VALID_LANGUAGES]


def is_valid_output(output: Optional[str]) -> bool:
    return output is not None and bool(output.strip())


def resolve_extensions(language: str, table: Mapping[str, List[str]] = LANGUAGE_EXTENSIONS) -> List[str]:
    key = language.lower()
    key = LANGUAGE_ALIASES.get(key, key)
    try:
        return list(table[key])
    except KeyError:
        raise UnsupportedLanguageError(f"Unsupported language: {language}") from None


def collect_extensions(languages: Iterable[str], table: Mapping[str, List[str]] = LANGUAGE_EXTENSIONS) -> List[str]:
    seen: List[str] = []
    for lang in languages:
        for pattern in resolve_extensions(lang, table):
            if pattern not in seen:
                seen.append(pattern)
    return seen


def _raise_missing(err: OSError) -> None:
    if isinstance(err, FileNotFoundError):
        raise DirectoryNotFoundError(err.errno, "Directory not found", err.filename) from err
    raise err


def _is_ignored(path: str, root: str, ignored: Sequence[str]) -> bool:
    # compare directory segments only; the file name itself never matches
    parts = os.path.relpath(os.path.dirname(path), root).split(os.sep)
    return any(part in ignored for part in parts)


def scan(pattern: str, root: str, ignored: Sequence[str] = ()) -> List[str]:
    """Recursively list files under ``root`` whose name matches ``pattern``.

    Directories named in ``ignored`` are pruned and never entered.
    """
    found: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_missing):
        dirnames[:] = sorted(d for d in dirnames if d not in ignored)
        for name in sorted(filenames):
            if fnmatch.fnmatchcase(name, pattern):
                found.append(os.path.join(dirpath, name))
    return found


def collect_files(
    patterns: Iterable[str],
    root: Optional[str] = None,
    ignored: Sequence[str] = IGNORED_DIRECTORIES,
    exclude: Iterable[str] = (),
) -> List[str]:
    root = os.path.abspath(root or os.getcwd())
    if not os.path.isdir(root):
        raise DirectoryNotFoundError(2, "Directory not found", root)
    skip = {os.path.abspath(p) for p in exclude}
    files: List[str] = []
    seen = set()
    for pattern in patterns:
        for path in scan(pattern, root, ignored):
            if path in seen or path in skip or _is_ignored(path, root, ignored):
                continue
            seen.add(path)
            files.append(path)
    return files


def order_files(files: Iterable[str], by_name: bool) -> List[str]:
    if by_name:
        return sorted(files, key=os.path.basename)
    return sorted(files, key=lambda p: os.path.splitext(p)[1])


def strip_empty_lines(text: str) -> str:
    # only zero-length lines are dropped; whitespace-only lines stay
    return "\n".join(line for line in text.split("\n") if line)


def write_bundle(
    output: str,
    files: Iterable[str],
    root: Optional[str] = None,
    note: bool = False,
    remove_empty_lines: bool = False,
    author: Optional[str] = None,
    on_file: Optional[Callable[[str], None]] = None,
) -> int:
    root = os.path.abspath(root or os.getcwd())
    parent = os.path.dirname(os.path.abspath(output))
    if not os.path.isdir(parent):
        raise DirectoryNotFoundError(2, "Directory not found", parent)
    count = 0
    with open(output, "w", encoding="utf-8") as f:
        if author and author.strip():
            f.write(AUTHOR_LINE.format(author=author) + "\n")
        for path in files:
            if note:
                f.write(NOTE_LINE.format(path=os.path.relpath(path, root)) + "\n")
            with open(path, "r", encoding="utf-8", errors="replace") as src:
                content = src.read()
            if remove_empty_lines:
                content = strip_empty_lines(content)
            f.write(content + "\n")
            count += 1
            if on_file is not None:
                on_file(path)
    return count


def bundle(opts: BundleOptions, on_file: Optional[Callable[[str], None]] = None) -> int:
    patterns = collect_extensions(opts.languages)
    files = collect_files(patterns, opts.root, exclude=[opts.output])
    files = order_files(files, opts.sort)
    return write_bundle(
        opts.output,
        files,
        root=opts.root,
        note=opts.note,
        remove_empty_lines=opts.remove_empty_lines,
        author=opts.author,
        on_file=on_file,
    )


def parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v == "true":
        return True
    if v == "false":
        return False
    raise ValueError(f"String '{value}' was not recognized as a valid Boolean.")


def response_line(opts: BundleOptions) -> str:
    return (
        f"fib bundle --language {','.join(opts.languages)} --output {opts.output}"
        f" --note {opts.note} --sort {opts.sort}"
        f" --remove-empty-lines {opts.remove_empty_lines} --author \"{opts.author}\""
    )


def write_response_file(opts: BundleOptions, file_path: str = RESPONSE_FILE_NAME) -> str:
    with open(file_path, "w", encoding="utf-8") as f:
        f.write(response_line(opts))
    return file_path


def read_response_args(line: str) -> List[str]:
    args = shlex.split(line)
    if args and args[0] == "fib":
        args = args[1:]
    return args


def prompt_options(ask: Optional[Callable[[str], str]] = None) -> BundleOptions:
    ask = ask or input
    print("Please enter the values for the following options:")
    language = ask("Language (comma-separated): ")
    output = ask("Output file path: ")
    note = parse_bool(ask("Include notes (true/false): "))
    sort = parse_bool(ask("Sort files (true/false): "))
    remove_empty_lines = parse_bool(ask("Remove empty lines (true/false): "))
    author = ask("Author: ")
    return BundleOptions(
        languages=parse_languages(language),
        output=output,
        note=note,
        sort=sort,
        remove_empty_lines=remove_empty_lines,
        author=author,
    )


def _error(code: str, **extra) -> int:
    print("ERROR " + json.dumps({"code": code, **extra}))
    return 1


BUNDLE_VALUES = {
    "-l": "language", "--language": "language",
    "-d": "output", "--output": "output",
    "-a": "author", "--author": "author",
    "--root": "root",
}
BUNDLE_FLAGS = {
    "-n": "note", "--note": "note",
    "-s": "sort", "--sort": "sort",
    "-r": "remove_empty_lines", "--remove-empty-lines": "remove_empty_lines",
}


def _bundle_args(rest: List[str]) -> dict:
    """Walk ``rest`` left to right; a token consumed as a value is never read as an option."""
    found: dict = {}
    i = 0
    while i < len(rest):
        arg = rest[i]
        nxt = rest[i + 1] if i + 1 < len(rest) else None
        if arg in BUNDLE_VALUES:
            if nxt is None:
                raise ValueError(f"option {arg} expects a value")
            found[BUNDLE_VALUES[arg]] = nxt
            i += 2
        elif arg in BUNDLE_FLAGS:
            if nxt is not None and nxt.lower() in ("true", "false"):
                found[BUNDLE_FLAGS[arg]] = parse_bool(nxt)
                i += 2
            else:
                found[BUNDLE_FLAGS[arg]] = True
                i += 1
        else:
            raise ValueError(f"unrecognized argument: {arg}")
    return found


def run_bundle(opts: BundleOptions) -> int:
    bad = invalid_languages(opts.languages)
    if bad or not opts.languages:
        return _error(
            "unsupported_language",
            language=bad[0] if bad else "",
            valid=VALID_LANGUAGES,
        )
    if not is_valid_output(opts.output):
        return _error("output_required")
    try:
        n = bundle(opts, on_file=lambda p: print("INFO " + json.dumps({"added": p})))
    except DirectoryNotFoundError as e:
        return _error("directory_not_found", path=e.filename)
    except (OSError, ValueError) as e:
        return _error("io_error", message=str(e))
    print("INFO " + json.dumps({"bundled": n, "output": os.path.abspath(opts.output)}))
    return 0


def run_command(argv: List[str]) -> int:
    if not argv:
        return _error("no_command")
    cmd, *rest = argv
    try:
        if cmd in ("bundle", "b"):
            hint = "bundle -l <languages> -d <output> [-n] [-s] [-r] [-a author]"
            try:
                found = _bundle_args(rest)
            except ValueError as e:
                return _error("bad_args", message=str(e), hint=hint)
            if "language" not in found or "output" not in found:
                return _error("bad_args", hint=hint)
            opts = BundleOptions(
                languages=parse_languages(found["language"]),
                output=found["output"],
                note=found.get("note", False),
                sort=found.get("sort", False),
                remove_empty_lines=found.get("remove_empty_lines", False),
                author=found.get("author") or "",
                root=found.get("root"),
            )
            return run_bundle(opts)

        elif cmd == "create-rsp":
            try:
                opts = prompt_options()
            except ValueError as e:
                return _error("bad_args", message=str(e))
            except EOFError:
                return _error("bad_args", message="input ended before all options were entered")
            try:
                name = write_response_file(opts)
            except (OSError, ValueError) as e:
                return _error("io_error", message=str(e))
            print("INFO " + json.dumps({"response_file": name}))
            return 0

        else:
            return _error("unknown_command", cmd=cmd)
    except BrokenPipeError:
        return 0
