"""
CLI REPL (Read-Eval-Print Loop) for ec600npy.

Provides an interactive AT command terminal with call and status shortcuts.
"""

import sys
import logging
from typing import Optional

from .config import ModemConfig
from .modem import EC600NModem
from .types import CallStatus
from .version import __version__
from .exceptions import EC600NError


class EC600NCLI:
    """Interactive AT command REPL."""

    def __init__(self, config: ModemConfig):
        """
        Initialize CLI.

        Args:
            config: Driver settings (port, baudrate, call duration, ...)
        """
        self.config = config
        self.modem: Optional[EC600NModem] = None
        self.event_count = 0

    def _display_call_status(self, status: CallStatus):
        """Print call-progress events as they arrive."""
        self.event_count += 1
        print(f"\n[CALL {self.event_count}] {status.value}")
        print("> ", end="", flush=True)

    def run(self):
        """Run the REPL."""
        print(f"ec600npy CLI v{__version__}")
        print(f"Connecting to {self.config.port} at {self.config.baudrate} baud...")
        print("Type 'help' for commands, 'quit' to exit\n")

        try:
            self.modem = EC600NModem(
                config=self.config,
                on_call_status=self._display_call_status
            )
            self.modem.connect()

            print("Connected! Ready for AT commands.\n")

            # REPL loop
            while True:
                try:
                    cmd = input("> ").strip()

                    if not cmd:
                        continue

                    word, _, arg = cmd.partition(" ")
                    word = word.lower()

                    # Handle special commands
                    if word in ("quit", "exit", "q"):
                        break
                    elif word == "help":
                        self._print_help()
                    elif word == "clear":
                        print("\033[2J\033[H", end="")  # Clear screen
                    elif word == "status":
                        self._show_status()
                    elif word == "report":
                        self._send_report()
                    elif word == "call":
                        self._call(arg)
                    elif word == "hangup":
                        self._hangup()
                    else:
                        self._send_command(cmd)

                except KeyboardInterrupt:
                    print("\nUse 'quit' to exit")
                    continue
                except EOFError:
                    break

        except EC600NError as e:
            print(f"\nError: {e}")
            return 1
        except Exception as e:
            print(f"\nUnexpected error: {e}")
            logging.exception("CLI error")
            return 1
        finally:
            if self.modem:
                print("\nClosing connection...")
                self.modem.close()
                print("Goodbye!")

        return 0

    def _send_command(self, cmd: str):
        """Send AT command and display response."""
        try:
            response = self.modem.send_raw_at(cmd)
            print(response.rstrip() or "(no response)")
        except EC600NError as e:
            print(f"Error: {e}")

    def _show_status(self):
        """Show network status snapshot."""
        try:
            status = self.modem.check_network_status()
        except EC600NError as e:
            print(f"Error: {e}")
            return
        verdict = "normal" if self.modem.status.is_normal(status) else "ABNORMAL"
        print(f"\nNetwork status: {verdict}")
        print(self.modem.status.format_status(status))
        if status.signal_dbm is not None:
            print(f"Signal: {status.signal_dbm} dBm")

    def _send_report(self):
        """Send a status report through the notification sink."""
        try:
            normal = self.modem.start_network_monitoring()
            print(f"Report sent (network {'normal' if normal else 'abnormal'})")
        except EC600NError as e:
            print(f"Error: {e}")

    def _call(self, number: str):
        """Dial a number and hang up after the configured duration."""
        if not number:
            print("Usage: call <number>")
            return
        try:
            print(f"Calling {number} for {self.config.call_duration}s...")
            last = self.modem.call(number)
            print(f"Call finished: {last.value if last else 'no status reported'}")
        except EC600NError as e:
            print(f"Error: {e}")

    def _hangup(self):
        """Hang up the current call."""
        try:
            self.modem.hangup_call()
            print("Hung up")
        except EC600NError as e:
            print(f"Error: {e}")

    def _print_help(self):
        """Print help message."""
        print("""
Available commands:
  <AT command>   - Send AT command to module (e.g., AT+CSQ)
  status         - Show network status snapshot
  report         - Send network status report to the notification sink
  call <number>  - Call a number and hang up after the call duration
  hangup         - Hang up the current call
  help           - Show this help message
  clear          - Clear screen
  quit/exit/q    - Exit CLI

Common AT commands:
  AT+CSQ         - Check signal quality
  AT+CREG?       - Check network registration
  AT+COPS?       - Get current operator
  AT+CPIN?       - Check SIM status
  AT+CGSN        - Get IMEI
        """)


def main():
    """Main entry point for CLI."""
    import argparse

    parser = argparse.ArgumentParser(
        description="ec600npy CLI - Interactive AT command terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ec600n-cli /dev/ttyUSB0
  ec600n-cli /dev/ttyUSB0 --baudrate 9600
  ec600n-cli /dev/ttyUSB0 --duration 20
        """
    )

    parser.add_argument(
        "port",
        help="Serial port (e.g., /dev/ttyUSB0, COM3)"
    )
    parser.add_argument(
        "-b", "--baudrate",
        type=int,
        default=115200,
        help="Baud rate (default: 115200)"
    )
    parser.add_argument(
        "-d", "--duration",
        type=float,
        default=10.0,
        help="Seconds to stay in a call before hanging up (default: 10)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Setup logging
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    else:
        logging.basicConfig(
            level=logging.WARNING,
            format='%(levelname)s: %(message)s'
        )

    config = ModemConfig(
        port=args.port,
        baudrate=args.baudrate,
        call_duration=args.duration
    )

    cli = EC600NCLI(config)
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
