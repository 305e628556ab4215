import argparse
import json
import logging
import sys
from pathlib import Path

from image_upload.agents.orchestrator import UploadOrchestrator
from image_upload.errors import ImageUploadError
from image_upload.schemas import UploadRequest


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="上传 SVG 到 GitHub 并输出 raw 链接")
    parser.add_argument("--path", type=str, required=True, help="仓库内路径，如 images/diagram.svg")
    parser.add_argument("--file", type=str, default=None, help="SVG 文件；缺省时从 stdin 读取")
    parser.add_argument("--owner", type=str, default=None, help="仓库 owner")
    parser.add_argument("--repo", type=str, default=None, help="仓库名")
    parser.add_argument("--message", type=str, default=None, help="提交信息")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    svg = Path(args.file).read_text(encoding="utf-8") if args.file else sys.stdin.read()
    req = UploadRequest(
        content=svg, path=args.path, owner=args.owner, repo=args.repo, message=args.message
    )
    try:
        result = UploadOrchestrator().run(req)
    except ImageUploadError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(json.dumps(result.model_dump(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
