# -*- coding: utf-8 -*-
"""
ログ出力の設定を行うモジュールです。

ポイント:
- ハンドラは親ロガー "propagator" に 1 つだけ付けます。
  engine / report などのモジュールは "propagator.engine.fixpoint" のような
  子ロガーを使い、出力は親に伝播させます。
- 「何ラウンド目で何件の候補が消えたか」を追えるように、
  不動点ループは INFO / DEBUG でラウンドごとの件数を出します。
- レベルは config.LOG_LEVEL、環境変数 PROPAGATOR_LOG_LEVEL で上書きできます。
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .config import LOG_FORMAT, LOG_LEVEL

LOGGER_NAME = "propagator"

# このモジュールが付けたハンドラの目印
_HANDLER_ATTR = "_propagator_handler"


def _resolve_level() -> int:
    name = os.getenv("PROPAGATOR_LOG_LEVEL", LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _configure(root: logging.Logger) -> None:
    if any(getattr(h, _HANDLER_ATTR, False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)
    root.setLevel(_resolve_level())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    propagator 配下のロガーを返します。

    name を省略すると親ロガー "propagator" を、
    "engine" や __name__ を渡すとその子ロガーを返します。
    初回呼び出し時に親ロガーへコンソール出力のハンドラを付けます。
    """
    root = logging.getLogger(LOGGER_NAME)
    _configure(root)

    if not name or name == LOGGER_NAME:
        return root
    if not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
