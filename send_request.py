#!/usr/bin/env python3
"""
Send a solve request to a running server and print its acknowledgement.
"""
import argparse
import json
import os

import requests
from dotenv import load_dotenv


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--server", default="http://localhost:3000/quiz-endpoint")
    parser.add_argument("--email", required=True)
    parser.add_argument("--secret", default=os.getenv("QUIZ_SECRET", ""))
    parser.add_argument("--url", required=True, help="quiz page to solve")
    args = parser.parse_args()

    payload = {"email": args.email, "secret": args.secret, "url": args.url}

    print("Sending request to:", args.server)
    print("Quiz URL:", args.url)

    response = requests.post(args.server, json=payload, timeout=30)

    print("\nResponse Status:", response.status_code)
    print("Response Body:")
    try:
        print(json.dumps(response.json(), indent=2))
    except ValueError:
        print(response.text)


if __name__ == "__main__":
    main()
