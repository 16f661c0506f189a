"""
Basic connection example.

Demonstrates connecting to the module and reading device information.
"""

from ec600npy import EC600NModem, EC600NError

# Replace with your serial port
PORT = "/dev/ttyUSB0"


def main():
    """Main function."""
    print("ec600npy - Basic Connection Example\n")

    with EC600NModem(port=PORT) as modem:
        print(f"Connected to {modem.connection.port} at {modem.connection.baudrate} baud\n")

        print("=== Device Information ===")
        print(modem.send_raw_at("ATI").strip())

        imei = modem.device.get_imei()
        print(f"IMEI: {imei}")

        print("\n=== SIM Information ===")
        try:
            sim_state = modem.device.get_sim_state()
            print(f"SIM State: {sim_state.value}")
        except EC600NError as e:
            print(f"SIM Error: {e}")

    print("\nConnection closed.")


if __name__ == "__main__":
    main()
