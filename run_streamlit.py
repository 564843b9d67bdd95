#!/usr/bin/env python3
"""
Launcher for the Metric Explorer Streamlit page.
Puts src/ on PYTHONPATH so the page can import the roadmap packages.
"""

import subprocess
import sys
import os

PORT = "8501"

def streamlit_commands(page_path):
    args = ["run", page_path, "--server.port", PORT, "--theme.base", "light"]
    return [
        ["streamlit"] + args,
        [sys.executable, "-m", "streamlit"] + args,
    ]

def main():
    root = os.path.dirname(os.path.abspath(__file__))
    src_dir = os.path.join(root, "src")
    page_path = os.path.join(src_dir, "metric_explorer.py")

    if not os.path.exists(page_path):
        print(f"Error: metric_explorer.py not found under {src_dir}")
        sys.exit(1)

    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [src_dir, env.get("PYTHONPATH")]))

    print(f"📊 Metric Explorer on http://localhost:{PORT} (Ctrl+C to stop)")

    try:
        for cmd in streamlit_commands(page_path):
            try:
                subprocess.run(cmd, check=True, env=env)
                return
            except (FileNotFoundError, subprocess.CalledProcessError):
                continue
    except KeyboardInterrupt:
        print("\n👋 Metric Explorer stopped")
        return

    print("❌ Could not start Streamlit. Install the project first: pip install -e .")
    sys.exit(1)

if __name__ == "__main__":
    main()
