#!/usr/bin/env python3
"""Register a core member from the terminal against a running server.

Usage:
  REGISTRATION_URL=http://localhost:5000 ./scripts/register_member.py
"""
import asyncio
import os
import sys

# Ensure the project root is on sys.path so `core_registration` can be imported
# when this script is executed directly from the `scripts/` folder.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import httpx

from core_registration.form.controller import MemberFormController
from core_registration.models.models import FIELD_LABELS, GENDERS, MEMBER_FIELDS


def prompt(field):
    label = FIELD_LABELS[field]
    if field == "gender":
        label += f" ({'/'.join(GENDERS)})"
    elif field == "birthdate":
        label += " (YYYY-MM-DD)"
    while True:
        value = input(f"{label}: ").strip()
        if value:
            return value
        print(f"{FIELD_LABELS[field]} is required")


async def register(base_url):
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        controller = MemberFormController(client)
        try:
            while True:
                for field in MEMBER_FIELDS:
                    if not controller.form_data[field]:
                        controller.on_field_change(field, prompt(field))
                saved = await controller.on_submit()
                print(controller.toast.message)
                if saved:
                    return 0
                # fields are kept after a failure; let the user fix one and retry
                retry = input("Change a field and retry? [field name / empty to quit]: ").strip()
                if retry not in MEMBER_FIELDS:
                    return 1
                controller.on_field_change(retry, "")
        finally:
            controller.close()


def main():
    base_url = os.getenv("REGISTRATION_URL", "http://localhost:5000")
    return asyncio.run(register(base_url))


if __name__ == "__main__":
    sys.exit(main())
