# -*- coding: utf-8 -*-
"""
propagator 全体で共通して使う設定値をまとめたモジュールです。

実運用時には、ここを編集することで
- 盤面サイズ（ボックスの形）
- モデル登録時の検証の強さ
- レポートでどのキーでグループ化するか
などを簡単に変更できます。
"""

from __future__ import annotations

# ==== 盤面関連 =============================================================

# 1辺のマス数（= 値の種類数）。BOX_ROWS * BOX_COLS と一致している必要がある
SUDOKU_SIZE: int = 9

# ボックス（ブロック）の縦・横のマス数
BOX_ROWS: int = 3
BOX_COLS: int = 3

# 空きマスとして扱う文字
BLANK_CHARS: str = ".0_ "

# ==== モデル検証関連 =======================================================

# 除外関数の対称性（A が B を除外するなら B も A を除外する）を
# 登録時に検査するかどうか。候補全体 × 除外数 の計算量がかかる。
VALIDATE_SYMMETRY: bool = True

# 除外関数が候補全体（universe）の外の事実を返したらエラーにするか
VALIDATE_CLOSED_UNIVERSE: bool = True

# ==== レポート関連 =========================================================

# Reporter が既定でグループ化に使うキー射影の名前
# （"cell" なら「マスごとの残り候補数」の分布になる）
REPORT_PROJECTION: str = "cell"

# ==== Web API 関連 =========================================================

# メモリ上に保持するセッション数の上限。超えたら古いものから捨てる
MAX_SESSIONS: int = 64

# Web API で受け付ける盤面サイズの上限。候補全体は size^3 個になり、
# モデル登録時の検証はリクエストの中で走る
MAX_BOARD_SIZE: int = 16

# ==== ログ関連 =============================================================

# 既定のログレベル。環境変数 PROPAGATOR_LOG_LEVEL があればそちらを優先する
LOG_LEVEL: str = "INFO"

LOG_FORMAT: str = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
