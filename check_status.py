#!/usr/bin/env python3
"""
Quick status check for a trendfeed deployment
"""

import os
from datetime import datetime

import requests
from dotenv import load_dotenv

REQUIRED_VARS = {
    'YOUTUBE_API_KEY': "YouTube Data API key (ingestion)",
    'SUPABASE_URL': "Supabase project URL",
}
KEY_VARS = ('SUPABASE_SERVICE_ROLE_KEY', 'SUPABASE_ANON_KEY')


def check_env():
    """Check environment configuration (.env is loaded first)"""
    print("📋 Checking Configuration")
    print("-" * 40)
    load_dotenv()

    ok = True
    for name, label in REQUIRED_VARS.items():
        present = bool(os.environ.get(name, '').strip())
        ok = ok and present
        print(f"  {name} ({label}): {'✅' if present else '❌'}")

    key_name = next((k for k in KEY_VARS if os.environ.get(k, '').strip()), None)
    ok = ok and key_name is not None
    print(f"  Supabase key: {'✅ ' + key_name if key_name else '❌ Not set'}")
    print(f"  PG_DSN (schema bootstrap): {'✅' if os.environ.get('PG_DSN') else '➖ Not set (optional)'}")
    return ok


def check_api(base_url):
    """Ping the API health endpoint"""
    print("\n🔌 Checking API")
    print("-" * 40)
    try:
        response = requests.get(f"{base_url}/health", timeout=5)
        data = response.json()
        if response.status_code == 200 and data.get('status') == 'ok':
            print(f"  {base_url}: ✅ Healthy (server time {data.get('timestamp')})")
            return True
        print(f"  {base_url}: ⚠️  HTTP {response.status_code}")
    except requests.exceptions.ConnectionError:
        print(f"  {base_url}: ❌ Not responding")
    except Exception as e:
        print(f"  {base_url}: ⚠️  Error: {e}")
    return False


def main():
    """Main status check"""
    print("🔍 trendfeed Status Check")
    print("=" * 50)
    print(f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    env_ok = check_env()
    port = os.environ.get('PORT', '3001')
    api_ok = check_api(f"http://localhost:{port}")

    print("\n" + "=" * 50)
    if not env_ok:
        print("❌ CONFIGURATION ISSUE: set the missing variables in .env")
    elif not api_ok:
        print("💡 Start the API with: python3 web_app.py")
    else:
        print("✅ All checks passed")
    return 0 if env_ok and api_ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
