from setuptools import setup

setup(name='lastcall',
      version='1.0.1',
      description="Per-instance memoization of the last call to a method",
      long_description="",
      author='Angus Hollands',
      author_email='goosey15@gmail.com',
      license='MIT',
      packages=['lastcall', 'lastcall.testing'],
      zip_safe=False,
      python_requires='>=3.7',
      install_requires=[
          'numpy',
          'configobj',
          ],
      )
