#!/usr/bin/env python3

from datetime import datetime, timedelta, timezone

from parking_pos.database import SessionLocal, init_db
from parking_pos.fees.schemas import FeeScheduleName
from parking_pos.models import ParkingTicket, ParkingLog, LedgerEntry
from parking_pos.tickets.service import TicketStore

def create_seed_data():
    init_db()
    db = SessionLocal()
    
    try:
        print("🚀 Creating seed data for Parking POS...")
        
        # Clear existing data (in reverse dependency order)
        print("Clearing existing data...")
        db.query(LedgerEntry).delete()
        db.query(ParkingLog).delete()
        db.query(ParkingTicket).delete()
        db.commit()
        
        store = TicketStore(db)
        now = datetime.now(timezone.utc)
        
        # 1. Open tickets at different stages of a stay
        print("Creating open tickets...")
        stays = [
            ("car", False, timedelta(minutes=10)),
            ("car", False, timedelta(hours=2)),
            ("car", False, timedelta(hours=5, minutes=20)),
            ("car", True, timedelta(hours=4)),
            ("motorcycle", False, timedelta(hours=1)),
            ("car", False, timedelta(days=1, hours=1)),
        ]
        for vehicle_type, is_pwd, stay in stays:
            store.create_ticket(vehicle_type, "gate-1", is_pwd, now - stay)
        
        # 2. A ticket issued under the superseded schedule
        store.create_ticket("car", "gate-1", False, now - timedelta(hours=4), fee_schedule=FeeScheduleName.LEGACY)
        
        # 3. Paid tickets
        print("Creating paid tickets...")
        paid = store.create_ticket("car", "gate-1", False, now - timedelta(hours=3, minutes=30))
        store.pay_ticket(paid.id, "cashier-1", now)
        store.pay_first("cashier-1", False, now)
        store.pay_first("cashier-1", True, now)
        
        print("✅ Seed data created")
    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
