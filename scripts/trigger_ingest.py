# scripts/trigger_ingest.py
# Usage: python scripts/trigger_ingest.py <playlist_id> --channel morning [--start 0 --end 200]
import argparse
import json
import requests
from jukebox.config.settings import JUKEBOX_API_URL


def main():
    parser = argparse.ArgumentParser(description="Ingest a Spotify playlist into Firestore")
    parser.add_argument("playlist_id")
    parser.add_argument("--channel", default=None, help="tag saved with every track")
    parser.add_argument("--start", type=int, default=None)
    parser.add_argument("--end", type=int, default=None)
    parser.add_argument("--api-url", default=JUKEBOX_API_URL)
    args = parser.parse_args()

    payload = {"playlistId": args.playlist_id, "channelTag": args.channel}
    if args.start is not None and args.end is not None:
        payload["start"] = args.start
        payload["end"] = args.end

    # 整個 playlist 可能要跑幾分鐘
    try:
        response = requests.post(f"{args.api_url.rstrip('/')}/tracks/playlist", json=payload, timeout=500)
        response.raise_for_status()
        print(json.dumps(response.json(), indent=4, ensure_ascii=False))
    except requests.exceptions.HTTPError as err:
        print(f"HTTP error: {err}")
        print("Response Body:", response.text)
    except requests.exceptions.RequestException as err:
        print(f"Connection error (is uvicorn running?): {err}")


if __name__ == "__main__":
    main()
