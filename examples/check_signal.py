"""
Network status monitoring example.

Checks the network periodically and reports every snapshot to the log.
"""

import logging
import time

from ec600npy import EC600NModem, ModemConfig, NotifyError

# Replace with your serial port
PORT = "/dev/ttyUSB0"


def main():
    """Main function."""
    logging.basicConfig(level=logging.INFO)
    print("ec600npy - Network Status Monitor\n")

    config = ModemConfig(port=PORT, network_check_interval=5)
    interval_seconds = config.network_check_interval * 60

    with EC600NModem(config=config) as modem:
        print(f"Checking every {config.network_check_interval} min (Ctrl+C to stop)...\n")

        try:
            while True:
                status = modem.check_network_status()
                dbm = status.signal_dbm
                print(f"Signal: {status.signal_strength} ({dbm if dbm is not None else '?'} dBm)")

                if status.registration_state.is_registered:
                    print(f"Registered: {status.registration_state.value} on {status.operator_name}")
                else:
                    print(f"Not registered: {status.registration_state.value}")

                try:
                    modem.status.report(status)
                except NotifyError as e:
                    print(f"Report failed: {e}")

                print("-" * 40)
                time.sleep(interval_seconds)

        except KeyboardInterrupt:
            print("\nStopping monitor...")


if __name__ == "__main__":
    main()
