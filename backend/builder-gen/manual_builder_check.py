import json
import sys

import requests

from config import SERVICE_URL

# path to a CIR dump produced by the PHP reflector
FILE_PATH = sys.argv[1] if len(sys.argv) > 1 else "tests/fixtures/user_cir.json"
CLASS_NAME = sys.argv[2] if len(sys.argv) > 2 else "Example\\User"

with open(FILE_PATH, "r", encoding="utf-8") as f:
    cir = json.load(f)

# 1) Single class
resp = requests.post(f"{SERVICE_URL}/builder", json={"cir": cir, "class_name": CLASS_NAME}, timeout=30)
resp.raise_for_status()
data = resp.json()

print(f"=== {data['builder_name']} ===")
print(data.get("php") or "NOT GENERATED")

# 2) Whole CIR
resp = requests.post(f"{SERVICE_URL}/builder/batch", json={"cir": cir}, timeout=30)
resp.raise_for_status()

print("\n=== Batch ===")
for b in resp.json()["builders"]:
    print(f"{b['class_name']} -> {b['builder_name']}")
