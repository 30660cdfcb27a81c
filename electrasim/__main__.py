"""
ElectraSim: entry point.

Usage:
    python -m electrasim serve                  # start web server on :8000
    python -m electrasim serve --port 3000
    python -m electrasim sketch                 # print the demo board's sketches
    python -m electrasim sketch --mode global --out sketches/
"""

import logging
import sys
from pathlib import Path


def main():
    args = sys.argv[1:]
    cmd = args[0] if args else "serve"

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    from electrasim.config import load_settings
    settings = load_settings()

    if cmd == "serve":
        port = settings.port
        host = settings.host
        for i, a in enumerate(args):
            if a == "--port" and i + 1 < len(args):
                port = int(args[i + 1])
            elif a == "--host" and i + 1 < len(args):
                host = args[i + 1]

        from electrasim.web.server import main as serve
        serve(host=host, port=port)
    elif cmd == "sketch":
        from electrasim.firmware import write_sketches
        from electrasim.session import DesignSession
        from electrasim.workspace import AssignmentMode

        mode = settings.assignment_mode
        out_dir = None
        for i, a in enumerate(args):
            if a == "--mode" and i + 1 < len(args):
                mode = AssignmentMode.parse(args[i + 1])
            elif a == "--out" and i + 1 < len(args):
                out_dir = Path(args[i + 1])

        sess = DesignSession.with_demo_board(mode, strict_pins=settings.strict_pins)
        if out_dir is not None:
            for path in write_sketches(sess.sketches, out_dir):
                print(f"Generated: {path}")
        else:
            for sketch_id, text in sess.sketches.items():
                print(f"// ===== {sketch_id} =====")
                print(text)
                print()
    else:
        print(f"Unknown command: {cmd}")
        print("Usage: python -m electrasim serve [--port PORT] [--host HOST]")
        print("       python -m electrasim sketch [--mode global|per_controller] [--out DIR]")
        sys.exit(1)


if __name__ == "__main__":
    main()
