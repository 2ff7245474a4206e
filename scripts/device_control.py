# scripts/device_control.py
# Usage:
#   python scripts/device_control.py <user_id> play
#   python scripts/device_control.py <user_id> pause
#   python scripts/device_control.py <user_id> device <device_id>
import argparse
import logging
from jukebox.player.playback_client import PlaybackSessionClient
from jukebox.services.firestore_client import get_db


def main():
    parser = argparse.ArgumentParser(description="Control the jukebox device")
    parser.add_argument("user_id")
    parser.add_argument("command", choices=["play", "pause", "device"])
    parser.add_argument("device_id", nargs="?")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    client = PlaybackSessionClient(args.user_id, get_db())

    if args.command == "play":
        ok = client.play_now()
    elif args.command == "pause":
        ok = client.pause()
    else:
        if not args.device_id:
            parser.error("device needs a device_id")
        client.save_device_id(args.device_id)
        ok = True

    print("ok" if ok else "failed")


if __name__ == "__main__":
    main()
