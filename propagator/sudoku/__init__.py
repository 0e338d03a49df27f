# -*- coding: utf-8 -*-
"""
propagator.sudoku パッケージ

エンジンに差し込む数独のルールインスタンスです。
- parser.py    : DataFrame / 文字列から盤面と初期候補事実への変換
- keys.py      : マス・行・列・ボックスのキー射影
- exclusion.py : 除外関数（カテゴリを選べる）
- model.py     : 上記を束ねた ConstraintModel の組み立て
"""
