"""
FSBM CLI launcher for running from a source checkout.

Works without installing the package: puts src/ on the path and hands
over to fsbm.cli.
"""
import sys
import os

src_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "src"))
if src_path not in sys.path:
    sys.path.insert(0, src_path)

try:
    from fsbm.cli import main
except ImportError as e:
    print(f"Error importing fsbm.cli: {e}", file=sys.stderr)
    print(f"Python path: {sys.path}", file=sys.stderr)
    sys.exit(1)

if __name__ == "__main__":
    main()
