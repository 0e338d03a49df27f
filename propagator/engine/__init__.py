# -*- coding: utf-8 -*-
"""
propagator.engine パッケージ

数独に依存しない、汎用の増分制約伝播エンジンです。

主に以下の役割を持つモジュールから構成されています。
- store.py       : 事実の多重集合（Fact Store）
- model.py       : キー射影・除外関数と、その契約検査
- rules.py       : 撤回ルール（共通除外 / 唯一候補）
- fixpoint.py    : 撤回が出なくなるまでの反復と、終端条件の判定
- incremental.py : 更新バッチを受けて安定状態を作り直すコントローラ
"""
