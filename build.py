import argparse
import os
import subprocess
import sys
from pathlib import Path

# Windows 以外では --add-data の区切りが ":" になる
DATA_SEP = ";" if sys.platform == "win32" else ":"

ASYNCIO_HIDDEN_IMPORTS = [
    "asyncio",
    "asyncio.events",
    "asyncio.base_events",
    "asyncio.proactor_events",
    "asyncio.windows_events",
    "asyncio.windows_utils",
]


def _runtime_hook(api_url: str) -> Path:
    """ビルド時の API URL を exe に焼き込むランタイムフックを書き出す。"""
    hook = Path("build") / "rthook_api_url.py"
    hook.parent.mkdir(parents=True, exist_ok=True)
    hook.write_text(
        "import os\n"
        f"os.environ.setdefault('SOCIETY_ADMIN_API_URL', {api_url!r})\n",
        encoding="utf-8",
    )
    return hook


def build_args(api_url: str | None = None) -> list[str]:
    args = [
        "pyinstaller",
        "main.py",
        "--name",
        "SocietyAdmin",
        "--clean",
        "--onefile",
        "--collect-all",
        "flet_desktop",  # Bundle Flet desktop runtime
        "--collect-data",
        "flet",  # Bundle Flet data files (icons.json etc.)
        "--collect-data",
        "certifi",  # CA bundle for httpx TLS
        "--collect-submodules",
        "PIL",
    ]
    if Path("app.ico").exists():
        args += ["--icon", "app.ico", "--add-data", f"app.ico{DATA_SEP}."]
    for name in ASYNCIO_HIDDEN_IMPORTS:
        args += ["--hidden-import", name]
    if api_url:
        args += ["--runtime-hook", str(_runtime_hook(api_url))]

    # CI環境（GitHub Actions等）でない場合のみ、--noconsole を追加する
    if not os.environ.get("CI"):
        args.append("--noconsole")
    return args


def build():
    parser = argparse.ArgumentParser(description="Build the Society Admin executable")
    parser.add_argument("--api-url", help="API base URL baked into the executable")
    options = parser.parse_args()

    args = build_args(options.api_url)
    print(f"Running: {' '.join(args)}")
    result = subprocess.run(args)

    if result.returncode == 0:
        print("\nBuild successful! Executable is in the 'dist' folder.")
    else:
        print("\nBuild failed.")
        sys.exit(result.returncode)


if __name__ == "__main__":
    build()
