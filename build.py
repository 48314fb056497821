"""
Builds the DiskView console executable with PyInstaller
"""
import os
import shutil
import subprocess
import sys

EXE_NAME = 'DiskView.exe' if sys.platform.startswith('win') else 'DiskView'


def build():
    print("Cleaning old builds...")
    for folder in ['build', 'dist']:
        if os.path.exists(folder):
            shutil.rmtree(folder)

    print("Building executable...")

    cmd = [
        'pyinstaller',
        '--onefile',
        '--console',
        '--name', 'DiskView',
        '--add-data', f'diskview{os.pathsep}diskview',
        '--hidden-import', 'psutil',
        'main.py'
    ]

    result = subprocess.run(cmd, capture_output=True, text=True)

    if result.returncode == 0:
        print("Build finished!")
        exe_src = os.path.join('dist', EXE_NAME)
        print(f"Executable: {exe_src}")

        release_dir = 'release'
        os.makedirs(release_dir, exist_ok=True)
        shutil.copy(exe_src, os.path.join(release_dir, EXE_NAME))

        if os.path.exists('README.md'):
            shutil.copy('README.md', os.path.join(release_dir, 'README.md'))

        print(f"Release assembled in: {release_dir}/")
    else:
        print("Build failed:")
        print(result.stderr)
        sys.exit(1)


if __name__ == '__main__':
    build()
