import time
import subprocess
import httpx
import sys
import os
import signal

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"

SERVER_CMD = [sys.executable, "-m", "uvicorn", "backend.app.main:app", "--host", "127.0.0.1", "--port", "8000"]

SHAPE = {
    "type": "LineString",
    "coordinates": [[-76.5321, 3.4516], [-76.5298, 3.4489], [-76.5270, 3.4472]]
}


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def api(method, path, **kwargs):
    resp = httpx.request(method, f"{BASE_URL}{API_PREFIX}{path}", **kwargs)
    if resp.status_code >= 400:
        print(f"❌ {method} {path} failed: {resp.status_code} {resp.text}")
        raise Exception(f"{method} {path} failed")
    return resp.json()


def run_verification():
    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = subprocess.Popen(
        SERVER_CMD,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, "DB_ECHO": "True"}  # Enable echo to see SQL
    )

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        # 2. Create a run with one GPS sample
        print("\n--- [Step 2] Creating Run (Persistence Test) ---")
        profile = api("POST", "/profiles", json={"name": "Persistence Check"})
        vehicle = api("POST", "/vehicles", json={
            "profile_id": profile["id"],
            "plate": f"P{int(time.time()) % 100000000}"
        })
        route = api("POST", "/routes", json={
            "name": "Persistence Route", "profile_id": profile["id"], "shape": SHAPE
        })
        run = api("POST", "/runs/start", json={
            "route_id": route["id"], "vehicle_id": vehicle["id"], "profile_id": profile["id"]
        })
        position = api("POST", f"/runs/{run['id']}/positions", json={
            "profile_id": profile["id"], "lat": 3.42158, "lon": -76.5205
        })
        print(f"✅ Run {run['id']} started, position {position['id']} recorded")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        proc.send_signal(signal.SIGTERM)
        proc.wait()

    time.sleep(2)  # Wait for port release

    # 3. Restart Server
    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = subprocess.Popen(SERVER_CMD, stdout=subprocess.PIPE, stderr=subprocess.PIPE)

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        # 4. Read everything back
        print("\n--- [Step 5] Reading Back (Post-Restart) ---")
        runs = api("GET", "/my-runs", params={"profile_id": profile["id"]})
        if [item["id"] for item in runs] != [run["id"]] or runs[0]["status"] != "IN_PROGRESS":
            raise Exception(f"Run not persisted: {runs}")
        print("✅ Run Persisted")

        detail = api("GET", f"/routes/{route['id']}", params={"profile_id": profile["id"]})
        if detail["geometry"] != SHAPE:
            raise Exception("Route geometry changed across restart")
        print("✅ Route Geometry Persisted")

        trail = api("GET", f"/runs/{run['id']}/positions", params={"profile_id": profile["id"]})
        if [item["geometry"]["coordinates"] for item in trail] != [[-76.5205, 3.42158]]:
            raise Exception(f"Position not persisted: {trail}")
        print("✅ Position Persisted")

        # 5. Clean up the open run
        print("\n--- [Step 6] Finalizing Run ---")
        api("POST", f"/runs/{run['id']}/finalize", json={"profile_id": profile["id"]})
        print("✅ Run Completed")

    finally:
        print("\n--- [Step 7] Stopping Server ---")
        proc2.send_signal(signal.SIGTERM)
        proc2.wait()


if __name__ == "__main__":
    run_verification()
