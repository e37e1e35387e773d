# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db docegestao.db
  python app.py config show
  python app.py fichas list
  python app.py caixa importar caixa.xlsx
  python app.py painel
  python app.py rel evolucao --de 2025-01 --ate 2025-06
"""

from docegestao.adapters.cli import main

if __name__ == "__main__":
    main()
