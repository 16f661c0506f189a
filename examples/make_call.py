"""
Voice call example.

Dials a number, prints call progress as it happens and hangs up after a while.
"""

from ec600npy import EC600NModem, CallStatus

# Replace with your serial port and destination
PORT = "/dev/ttyUSB0"
NUMBER = "10086"


def on_call_status(status: CallStatus):
    """Handle call-progress statuses from the monitor thread."""
    print(f"\n[CALL] {status.value}")


def main():
    """Main function."""
    print("ec600npy - Voice Call Example\n")

    with EC600NModem(port=PORT, on_call_status=on_call_status) as modem:
        print(f"Calling {NUMBER} for 15 seconds...")

        last = modem.call(NUMBER, duration=15)

        print(f"Call finished, last status: {last.value if last else 'none'}")


if __name__ == "__main__":
    main()
