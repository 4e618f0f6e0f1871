from setuptools import setup, find_packages
from pathlib import Path

# --- Automated Script Discovery ---

HERE = Path(__file__).parent.resolve()
CLI_DIR = HERE / "cr_info" / "cli"

def discover_console_scripts() -> list[str]:
    """
    Build console-script entry points for every .py in cr_info/cli/.
    Command name  : file-stem with underscores → dashes  (query -> query)
    Entry point   : 'cr_info.cli.<module>:main'
    """
    if not CLI_DIR.exists():
        return []
    entries = []
    for path in sorted(CLI_DIR.glob("*.py")):
        if path.name == "__init__.py":
            continue
        cmd  = path.stem.replace("_", "-")
        mod  = f"cr_info.cli.{path.stem}"
        entries.append(f"{cmd} = {mod}:main")
    return entries


def parse_requirements(fname: str = "requirements.txt") -> list[str]:
    """
    Return a list of PEP-508 requirement strings taken from *fname*.
    Ignores blank lines and comments that start with '#'.
    """
    req_path = Path(__file__).with_name(fname)
    if not req_path.exists():
        return []

    lines = req_path.read_text().splitlines()
    reqs  = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue            # skip comments / empty lines
        reqs.append(line)
    return reqs


_ = setup(
    name="cr_info",
    version="1.0",
    description="Look up Crunchyroll series, episodes and movies and print them as csv or json.",
    packages=find_packages(exclude=["tests", "tests.*"]),

    # Entry points for Python console scripts
    entry_points = {
        "console_scripts": discover_console_scripts(),
    },

    python_requires=">=3.12",
    install_requires=parse_requirements(),
    extras_require={
        "test": parse_requirements("requirements-test.txt"),
    },
)
