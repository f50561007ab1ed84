#!/usr/bin/env python
"""
 * Copyright(c) 2021 ZettaScale Technology and others
 *
 * This program and the accompanying materials are made available under the
 * terms of the Eclipse Public License v. 2.0 which is available at
 * http://www.eclipse.org/legal/epl-2.0, or the Eclipse Distribution License
 * v. 1.0 which is available at
 * http://www.eclipse.org/org/documents/edl-v10.php.
 *
 * SPDX-License-Identifier: EPL-2.0 OR BSD-3-Clause

Runs the inkgen checks the way CI does. Each step is a list of commands run in order,
select a subset with --only, e.g. ``./local-ci.py --only lint tests``.
"""

import os
import sys
import argparse
import tempfile
import subprocess


ROOT = os.path.abspath(os.path.dirname(__file__))


def install_commands(args):
    return [([sys.executable, "-m", "pip", "install", "-e", ROOT + "[dev]"], ROOT)]


def lint_commands(args):
    # Syntax errors and undefined names fail the run, style issues are only reported.
    return [
        ([sys.executable, "-m", "flake8", "inkgen", "tests", "--select=E9,F63,F7,F82", "--show-source"], ROOT),
        ([sys.executable, "-m", "flake8", "inkgen", "tests", "--exit-zero", "--statistics"], ROOT),
    ]


def test_commands(args):
    command = [sys.executable, "-m", "pytest", os.path.join(ROOT, "tests")]
    if args.coverage:
        command += ["--cov=inkgen", "--cov-report=term-missing"]
    if args.keyword:
        command += ["-k", args.keyword]
    # Run outside the checkout so the installed package is the one under test.
    return [(command, None)]


def docs_commands(args):
    return [([sys.executable, "-m", "sphinx", "-W", "-b", "html", "docs/source", "docs/build/html"], ROOT)]


STEPS = {
    "install": (install_commands, False),
    "lint": (lint_commands, True),
    "tests": (test_commands, True),
    "docs": (docs_commands, False),
}


def parse_arguments(argv) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the inkgen CI steps locally.")
    parser.add_argument("--only", nargs="+", choices=list(STEPS), metavar="STEP",
                        help=f"Steps to run, out of {', '.join(STEPS)}. "
                             "By default everything except install and docs.")
    parser.add_argument("-c", "--coverage", action="store_true", help="Report test coverage of the inkgen package.")
    parser.add_argument("-k", "--keyword", help="Only run tests matching this pytest expression.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress all tool output.")
    return parser.parse_args(argv)


def run_step(name, commands, quiet) -> bool:
    print(f"==> {name}")
    output = dict(stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL) if quiet else {}
    with tempfile.TemporaryDirectory() as scratch:
        for command, cwd in commands:
            if subprocess.call(command, cwd=cwd or scratch, **output) != 0:
                print(f"==> {name} failed: {' '.join(command)}")
                return False
    return True


def main(argv) -> int:
    args = parse_arguments(argv)
    selected = args.only or [name for name, (_, default) in STEPS.items() if default]
    failed = [
        name for name in STEPS
        if name in selected and not run_step(name, STEPS[name][0](args), args.quiet)
    ]
    if failed:
        print(f"Failed steps: {', '.join(failed)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
