"""
アプリケーションのエントリーポイント。

このスクリプトは、環境変数から設定を読み込んでメモストアを生成し、
PyQt6アプリケーションとメインウィンドウを起動します。
また、プロジェクトのルートディレクトリをPythonのパスに追加し、
他のモジュール（ui, servicesなど）を正しくインポートできるように設定します。
"""
import logging
import sys
import os
from PyQt6.QtWidgets import QApplication

# このファイル(main.py)があるディレクトリをモジュール検索パスに追加します。
current_dir: str = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from services.api_service import APIService
from services.memo_service import MemoService
from ui.main_window import MainWindow
from utils.config import AppConfig


def main() -> int:
    # 1. 設定を読み込み、ログ出力を構成します。
    config: AppConfig = AppConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # 2. バックエンドのクライアントとメモストアを生成します。
    store: MemoService = MemoService(APIService.from_config(config))

    # 3. PyQtアプリケーションとメインウィンドウを作成して表示します。
    app: QApplication = QApplication(sys.argv)
    window: MainWindow = MainWindow(store)
    window.show()

    # 4. イベントループを開始し、終了コードを返します。
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
