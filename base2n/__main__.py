# Copyright 2019 Facebook Inc. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from . import *
from . import PAD_RFC_4648
import argparse
import logging
import sys


def _schemeName(scheme):
    return scheme.name.lower().replace("_", "-")


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="base2n",
        description="Encode or decode data with a base-2^n alphabet.",
    )
    parser.add_argument(
        "data",
        nargs="?",
        help="data to encode or text to decode (reads from stdin if not provided)",
    )
    parser.add_argument(
        "-d", "--decode", action="store_true", help="decode instead of encode"
    )
    parser.add_argument(
        "--scheme",
        type=str,
        default=None,
        help="standard scheme to use, see --list (default: base64)",
    )
    parser.add_argument(
        "--bits",
        type=int,
        help="bits per symbol for a custom alphabet (1-8)",
    )
    parser.add_argument(
        "--alphabet",
        type=str,
        help="custom alphabet of 2^bits characters (requires --bits)",
    )
    parser.add_argument(
        "--case-insensitive",
        action="store_true",
        help="decode custom alphabets without regard to case",
    )
    parser.add_argument(
        "--right-pad",
        action="store_true",
        help="put the bits of a short final symbol at its high end (RFC 4648)",
    )
    parser.add_argument(
        "--pad",
        nargs="?",
        const=PAD_RFC_4648,
        default=None,
        metavar="CHAR",
        help="pad custom output to whole groups with CHAR (default: '=')",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="fail on characters outside the alphabet instead of skipping them",
    )
    parser.add_argument(
        "-c",
        "--clean",
        "--ignore-garbage",
        action="store_true",
        help="remove all whitespace before decoding",
    )
    parser.add_argument(
        "-w",
        "--wrap",
        type=int,
        default=0,
        metavar="N",
        help="wrap encoded lines after N characters (default: 0, no wrapping)",
    )
    parser.add_argument(
        "--list", action="store_true", help="list the standard schemes and exit"
    )
    parser.add_argument(
        "-i",
        "--input",
        type=str,
        metavar="FILE",
        help="read data from FILE (default: positional arg or stdin)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        metavar="FILE",
        help="write output to FILE instead of stdout",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log debug messages to stderr"
    )

    parsed = parser.parse_args(args)

    if parsed.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(name)s: %(levelname)s: %(message)s"
        )

    if parsed.list:
        for scheme in Scheme:
            print(_schemeName(scheme))
        return 0

    if parsed.wrap < 0:
        parser.error("wrap length can not be negative: %d" % parsed.wrap)

    # Pick the configuration
    if parsed.bits is not None:
        if parsed.scheme is not None:
            parser.error("--scheme can not be combined with --bits")
        try:
            config = Configuration(
                parsed.bits,
                parsed.alphabet,
                caseSensitive=not parsed.case_insensitive,
                rightPadFinalBits=parsed.right_pad,
                padFinalGroup=parsed.pad is not None,
                padCharacter=parsed.pad,
            )
        except ConfigurationError as e:
            print("base2n: error: %s" % e, file=sys.stderr)
            return 1
    else:
        for flag, value in (
            ("--alphabet", parsed.alphabet is not None),
            ("--case-insensitive", parsed.case_insensitive),
            ("--right-pad", parsed.right_pad),
            ("--pad", parsed.pad is not None),
        ):
            if value:
                parser.error("%s requires --bits" % flag)
        try:
            config = factory(parsed.scheme or "base64")
        except UnknownSchemeError as e:
            parser.error(str(e))

    # Read input from file, positional arg, or stdin
    if parsed.input:
        with open(parsed.input, "rb") as f:
            raw = f.read()
    elif parsed.data is not None:
        raw = parsed.data.encode("utf-8")
    else:
        raw = sys.stdin.buffer.read()

    if parsed.decode:
        text = raw.decode("utf-8", "replace")
        text = config.clean(text) if parsed.clean else text.strip()
        try:
            result = config.decode(text, strict=parsed.strict)
        except DecodeError as e:
            print("base2n: error: %s" % e, file=sys.stderr)
            return 1
    else:
        text = config.format(config.encode(raw), parsed.wrap)
        result = (text + "\n").encode("utf-8")

    # Handle output file
    if parsed.output:
        with open(parsed.output, "wb") as f:
            f.write(result)
    else:
        sys.stdout.buffer.write(result)
        sys.stdout.buffer.flush()

    return 0


if __name__ == "__main__":
    sys.exit(main())
