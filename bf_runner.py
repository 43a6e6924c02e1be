#!/usr/bin/env python3
import argparse
import logging
import sys

from stepper import Stepper, StepError, TAPE_SIZE, END_OF_PROGRAM

log = logging.getLogger(__name__)

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


def run(stepper, sink):
    """Step until the program ends, writing output bytes to sink."""
    steps = 0
    while True:
        outcome = stepper.step()
        if outcome == END_OF_PROGRAM:
            break
        steps += 1
        if outcome.is_output:
            sink.write(bytes([outcome.byte]))
            sink.flush()
    log.debug("program finished after %d steps", steps)
    return steps


def load_program(path):
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def positive_int(text):
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def build_parser():
    parser = argparse.ArgumentParser(description="Run or debug a Brainfuck program.")
    parser.add_argument('file', nargs='?', help="program file (default: built-in Hello World)")
    parser.add_argument('-i', '--interactive', action='store_true',
                        help="start the line debugger instead of running")
    parser.add_argument('--tape-size', type=positive_int, default=TAPE_SIZE,
                        help=f"number of tape cells (default: {TAPE_SIZE})")
    parser.add_argument('-v', '--verbose', action='store_true', help="debug logging on stderr")
    return parser


def setup_logging(verbose):
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.file is None:
        code = HELLO_WORLD
    else:
        try:
            code = load_program(args.file)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
            return 1

    stdin = sys.stdin.buffer
    stepper = Stepper(code, tape_size=args.tape_size, input_stream=stdin)

    if args.interactive:
        from debugger import Debugger
        Debugger(stepper, stdin).loop()
        return 0

    try:
        run(stepper, sys.stdout.buffer)
    except StepError as e:
        sys.stdout.flush()
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
