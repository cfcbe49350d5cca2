#!/usr/bin/env python
"""
nugeom - Max Path-Length Script

Estimates the maximum density-weighted path length of every isotope in a
detector geometry and writes the table to Data/max_path_lengths.csv.

Usage:
    python compute_max_path_lengths.py -g detector.json
    python compute_max_path_lengths.py -g detector.json -t Target -n 50 -r 50
    python compute_max_path_lengths.py -g detector.json --ray 0 0 -500 0 0 1
"""

from pathlib import Path
import sys

# 添加项目根目录到路径（确保可以导入 nugeom）
project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from nugeom.runner import main


if __name__ == "__main__":
    main()
