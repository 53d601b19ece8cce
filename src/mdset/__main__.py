import sys

# Для PyInstaller: добавляем путь к модулю в sys.path
if getattr(sys, 'frozen', False):
    base_path = sys._MEIPASS
    sys.path.insert(0, base_path)
    from mdset.cli import main
else:
    from .cli import main

if __name__ == "__main__":
    main()
