# scripts/send_reminders.py
# =============================================================================
# 📣 Lanza un lote de recordatorios desde la terminal (sin pasar por la API).
# - Usa la misma lógica que POST /api/admin/reminders (ReminderDispatcher).
# - Respeta DRY_RUN y el resto de variables del .env.
# Ejemplos:
#   python scripts/send_reminders.py --wedding-id <id> --channel PREFERRED
#   python scripts/send_reminders.py --wedding-id <id> --channel EMAIL --family-id f1 --family-id f2
# =============================================================================

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Raíz del proyecto en sys.path para importar "nupci" sin instalar el paquete.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

load_dotenv()

from nupci.config import Settings  # noqa: E402
from nupci.db import SessionLocal  # noqa: E402
from nupci.errors import NupciError  # noqa: E402
from nupci.models import RequestChannel  # noqa: E402
from nupci.services.dispatcher import ReminderDispatcher, ReminderRequest  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Envía recordatorios RSVP a las familias elegibles.")
    parser.add_argument("--wedding-id", required=True, help="Id de la boda")
    parser.add_argument(
        "--channel",
        default=RequestChannel.PREFERRED.value,
        choices=[c.value for c in RequestChannel],
        help="Canal del lote (por defecto PREFERRED)",
    )
    parser.add_argument("--family-id", action="append", default=None, help="Limita el lote (repetible)")
    parser.add_argument("--message", default=None, help="Cuerpo personalizado del recordatorio")
    parser.add_argument("--admin-id", default="cli", help="Id registrado en la bitácora (por defecto 'cli')")
    args = parser.parse_args()

    settings = Settings.from_env()
    print(f"🚀 DRY_RUN={settings.dry_run} | canal={args.channel} | boda={args.wedding_id}")

    request = ReminderRequest(
        channel=RequestChannel(args.channel),
        message_template=(args.message or "").strip() or None,
        family_ids=args.family_id,
    )

    db = SessionLocal()
    try:
        batch = ReminderDispatcher(settings).run(db, args.wedding_id, request, admin_id=args.admin_id)
    except NupciError as e:
        print(f"❌ {e.code}: {e.message}")
        return 1
    except Exception as e:
        logger.exception("Fallo inesperado en el lote: {}", e)
        return 2
    finally:
        db.close()

    print(json.dumps(batch.to_dict(), indent=2, ensure_ascii=False))
    for result in batch.results:
        if not result.success:
            print(f"⚠️  {result.family_id}: {result.error}")
    print(f"✅ Enviados: {batch.sent_count} | ❌ Fallidos: {batch.failed_count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
