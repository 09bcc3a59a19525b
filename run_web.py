#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
웹 버전 FIFO 에이징 스케줄러 시뮬레이터 실행 파일
서버 시작 후 API 문서 페이지가 브라우저에서 열립니다.
"""

import sys
import socket
import threading
import webbrowser

import uvicorn

DEFAULT_PORT = 8000


def is_port_in_use(port: int) -> bool:
    """포트가 사용 중인지 확인"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex(('localhost', port)) == 0


def main(port: int = DEFAULT_PORT, open_browser: bool = True):
    url = f"http://localhost:{port}/docs"

    print("=" * 60)
    print("     FIFO 에이징 스케줄러 시뮬레이터 - 웹 버전")
    print("=" * 60)

    if is_port_in_use(port):
        print(f"\n⚠️  포트 {port}이 이미 사용 중입니다. 다른 포트를 지정하세요.")
        sys.exit(1)

    print(f"\n🚀 서버 시작 중... (포트: {port})")
    print(f"🌐 API 문서: {url}")
    print("\n" + "-" * 60)
    print("종료하려면 Ctrl+C를 누르세요.")
    print("-" * 60 + "\n")

    if open_browser:
        # 서버가 뜰 시간을 두고 브라우저 열기
        threading.Timer(1.5, webbrowser.open, args=(url,)).start()

    uvicorn.run("web.backend.app:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_PORT)
