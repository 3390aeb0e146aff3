from __future__ import annotations

from fibbench import main

main()
