# AuditLens — IO helpers (directories, JSON and JSONL writing)
# Author: Sachin Chhetri
# Year: 2025
# License: MIT

import json
import os
import threading
from typing import Any, Iterable


_dir_lock = threading.Lock()
_jsonl_lock = threading.Lock()


def ensure_dirs(*paths: str) -> None:
	with _dir_lock:
		for p in paths:
			os.makedirs(p, exist_ok=True)


def write_json(path: str, obj: Any) -> None:
	with open(path, "w", encoding="utf-8") as f:
		json.dump(obj, f, indent=2, ensure_ascii=False)


def write_jsonl(path: str, objs: Iterable[Any]) -> None:
	with _jsonl_lock:
		with open(path, "w", encoding="utf-8") as f:
			for obj in objs:
				f.write(json.dumps(obj, ensure_ascii=False) + "\n")


def write_lines(path: str, lines: Iterable[str]) -> None:
	with open(path, "w", encoding="utf-8") as f:
		f.write("\n".join(lines) + "\n")
