#!/usr/bin/env python3
import sys

from stepper import Stepper, StepError, END_OF_PROGRAM


class Colors:
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    REVERSE = '\033[7m'


HELP = """Commands:
  data [i ...]       show the current cell, or the cells at the given indices
  ip                 show the instruction pointer
  dp                 show the data pointer
  step [n]           execute n symbols (default 1)
  run                execute until the end, a breakpoint or an error
  break <ip>         toggle a breakpoint
  mem [addr] [count] dump count cells starting at addr (default: dp, 20)
  state              show pointers, tape and source around them
  help               this text
  exit               leave the debugger
An empty line repeats the last command."""


class Debugger:
    def __init__(self, stepper, stream=None):
        self.stepper = stepper
        # commands and ',' input share this binary stream
        self.stream = stream
        self.breakpoints = set()
        self.step_count = 0
        self.last_cmd = None

    def execute(self, line):
        """Run one command line. Returns False when the debugger should exit."""
        line = line.strip()
        if not line:
            if self.last_cmd is None:
                return True
            line = self.last_cmd
        self.last_cmd = line

        cmd, *args = line.split()
        handler = self.COMMANDS.get(cmd)
        if handler is None:
            print(f"The command `{cmd}` is not recognised.")
            return True
        return handler(self, args) is not False

    def cmd_data(self, args):
        s = self.stepper
        if not args:
            print(f"DATA[{s.dp}]={s.current_cell()}")
            return
        lines = []
        for arg in args:
            try:
                i = int(arg)
                if i < 0:
                    raise ValueError(arg)
            except ValueError:
                lines.append(f"Couldn't convert `{arg}` to a non-negative integer.")
                continue
            try:
                lines.append(f"DATA[{i}]={s.cell(i)}")
            except IndexError:
                lines.append(f"Index `{i}` out of bounds.")
        print("\n".join(lines))

    def cmd_ip(self, args):
        print(f"IP: {self.stepper.ip}")

    def cmd_dp(self, args):
        print(f"DP: {self.stepper.dp}")

    def cmd_step(self, args):
        count = 1
        if args:
            try:
                count = int(args[0])
            except ValueError:
                count = 0
        if count < 1:
            print("The argument to this should be >= 1")
            return
        print(f"Stepping {count} instructions.")
        self.advance(count)

    def cmd_run(self, args):
        self.advance(None)

    def cmd_break(self, args):
        try:
            bp = int(args[0])
        except (IndexError, ValueError):
            print("Usage: break <ip>")
            return
        if bp in self.breakpoints:
            self.breakpoints.remove(bp)
            print(f"Breakpoint removed at {bp}")
        else:
            self.breakpoints.add(bp)
            print(f"Breakpoint set at {bp}")

    def cmd_mem(self, args):
        try:
            addr = int(args[0]) if len(args) > 0 else self.stepper.dp
            count = int(args[1]) if len(args) > 1 else 20
        except ValueError:
            print("Usage: mem [addr] [count]")
            return
        print("Memory Dump:")
        for offset, val in enumerate(self.stepper.cells(addr, count)):
            print(f"[{max(0, addr) + offset:04}]: {val}")

    def cmd_state(self, args):
        self.print_state()

    def cmd_help(self, args):
        print(HELP)

    def cmd_exit(self, args):
        return False

    COMMANDS = {
        'data': cmd_data,
        'ip': cmd_ip,
        'dp': cmd_dp,
        'step': cmd_step,
        'run': cmd_run,
        'break': cmd_break,
        'mem': cmd_mem,
        'state': cmd_state,
        'help': cmd_help,
        'exit': cmd_exit,
    }

    def advance(self, limit):
        """Step up to limit symbols (None: no limit). Returns the number executed."""
        s = self.stepper
        done = 0
        while limit is None or done < limit:
            try:
                outcome = s.step()
            except StepError as e:
                print(f"\n{Colors.FAIL}Error: {e}{Colors.ENDC}")
                break
            if outcome == END_OF_PROGRAM:
                print(f"\n{Colors.GREEN}End of program.{Colors.ENDC}")
                break
            done += 1
            self.step_count += 1
            if outcome.is_output:
                sys.stdout.write(chr(outcome.byte))
                sys.stdout.flush()
            if s.ip in self.breakpoints:
                print(f"\nBreakpoint hit at {s.ip}")
                break
        return done

    def print_state(self):
        s = self.stepper
        print(f"\n{Colors.BOLD}--- Step {self.step_count} ---{Colors.ENDC}")
        print(f"IP: {s.ip} / {len(s.program)}")
        print(f"DP: {s.dp}")
        if s.open_brackets:
            print(f"Open loops: {', '.join(str(ip) for ip in s.open_brackets)}")

        window = 8
        start = max(0, s.dp - window)
        end = s.dp + window + 1
        tape_str = ""
        for i, val in enumerate(s.cells(start, end - start), start):
            if i == s.dp:
                tape_str += f"{Colors.REVERSE}[{val:03}]{Colors.ENDC} "
            else:
                tape_str += f" {val:03}  "
        print(f"Tape: {tape_str}")

        context = 2
        for i in range(max(0, s.ip - context), min(len(s.program), s.ip + context + 1)):
            char = s.program[i]
            shown = repr(char) if char.isspace() else char
            if i == s.ip:
                print(f"{Colors.GREEN}-> {i:04}: {shown}{Colors.ENDC}")
            else:
                print(f"   {i:04}: {shown}")

    def loop(self):
        print("A simple BF debugger. Type `help` for commands.")
        stream = self.stream if self.stream is not None else sys.stdin.buffer
        while True:
            sys.stdout.write(f"{Colors.BLUE}(bf-dbg){Colors.ENDC} ")
            sys.stdout.flush()
            raw = stream.readline()
            if not raw:
                print()
                break
            line = raw.decode("utf-8", errors="replace")
            if not self.execute(line):
                break


if __name__ == '__main__':
    if len(sys.argv) < 2:
        print("Usage: ./debugger.py <bf_file>")
        sys.exit(1)

    with open(sys.argv[1], 'r', encoding='utf-8') as f:
        code = f.read()

    stream = sys.stdin.buffer
    Debugger(Stepper(code, input_stream=stream), stream).loop()
