#!/usr/bin/env python3
"""
Punto de entrada del servicio Pulse (services/pulse/)
"""
import os

from dotenv import load_dotenv

if __name__ == "__main__":
    import uvicorn

    # Variables del .env disponibles antes de importar la app
    load_dotenv()
    port = int(os.getenv("PORT", "8000"))

    print("🚀 Iniciando Vox Pulse...")
    print(f"📍 Puerto: {port}")

    uvicorn.run(
        "services.pulse.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_level="info"
    )
