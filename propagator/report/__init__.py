# -*- coding: utf-8 -*-
"""
propagator.report パッケージ

スナップショットを外から確認するための集計・結果構築をまとめています。
- counts.py        : グループサイズ分布とその増減（Reporter）
- render_result.py : 盤面・候補数など、API で返す dict の構築
"""
